"""
db.py — MongoDB persistence layer.

Two collections back the whole app:

  • users     one document per Google account (unique on google_id).
  • searches  an append-only log of (user_id, term, timestamp) documents.

Search history and the global top-searches view are both read straight from
the ``searches`` log; nothing is pre-aggregated.  Terms are stored exactly as
they were searched (after trimming), so "Cats" and "cats" count separately.

The store is constructed once at startup and handed to the search service;
``connect()`` and ``close()`` bracket its lifetime.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import pymongo
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from config import (
    MONGO_DB,
    MONGO_TIMEOUT_MS,
    MONGO_URI,
    SEARCHES_COLLECTION,
    USERS_COLLECTION,
)
from errors import StoreError
from models import IdentityInfo, SearchRecord, TopSearchEntry, User

logger = logging.getLogger(__name__)


def _user_from_doc(doc: dict) -> User:
    return User(
        id=str(doc["_id"]),
        google_id=doc["google_id"],
        display_name=doc["display_name"],
        email=doc["email"],
        avatar=doc.get("avatar"),
    )


class MongoStore:
    """Users and search records kept in MongoDB."""

    def __init__(
        self,
        uri: str = MONGO_URI,
        db_name: str = MONGO_DB,
        users_collection: str = USERS_COLLECTION,
        searches_collection: str = SEARCHES_COLLECTION,
        timeout_ms: int = MONGO_TIMEOUT_MS,
        client: Optional[pymongo.MongoClient] = None,
    ):
        self._uri = uri
        self._db_name = db_name
        self._users_name = users_collection
        self._searches_name = searches_collection
        self._timeout_ms = timeout_ms
        self._client = client
        self._users = None
        self._searches = None

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def connect(self) -> None:
        """
        Open the client (if one was not injected) and bind the collections.

        MongoClient connects lazily, so an unreachable server does not stop
        the app from starting; index creation failures are logged and every
        later operation reports its own StoreError.
        """
        if self._client is None:
            self._client = pymongo.MongoClient(
                self._uri, serverSelectionTimeoutMS=self._timeout_ms, tz_aware=True
            )
        db = self._client[self._db_name]
        self._users = db[self._users_name]
        self._searches = db[self._searches_name]

        try:
            self._users.create_index("google_id", unique=True)
            self._searches.create_index(
                [("user_id", pymongo.ASCENDING), ("timestamp", pymongo.DESCENDING)]
            )
            self._searches.create_index("term")
            logger.info("Connected to MongoDB database '%s'.", self._db_name)
        except PyMongoError as exc:
            logger.error("MongoDB index setup failed: %s", exc)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed.")
        self._client = None
        self._users = None
        self._searches = None

    def ping(self) -> bool:
        """Return True when the server answers a ping."""
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError as exc:
            logger.warning("MongoDB ping failed: %s", exc)
            return False

    def _collection(self, name: str):
        collection = self._users if name == "users" else self._searches
        if collection is None:
            raise StoreError("Record store is not connected")
        return collection

    # ── Users ────────────────────────────────────────────────────────────────

    def upsert_user(self, identity: IdentityInfo) -> User:
        """
        Create the user on first login, or refresh name, email and avatar on
        every later login.  Keyed on the Google account id.
        """
        now = datetime.now(timezone.utc)
        try:
            doc = self._collection("users").find_one_and_update(
                {"google_id": identity.google_id},
                {
                    "$set": {
                        "display_name": identity.display_name,
                        "email": identity.email,
                        "avatar": identity.avatar,
                        "updated_at": now,
                    },
                    "$setOnInsert": {"google_id": identity.google_id, "created_at": now},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as exc:
            logger.error("MongoDB user upsert failed: %s", exc)
            raise StoreError() from exc

        logger.info("User %s signed in (google_id=%s).", doc["_id"], identity.google_id)
        return _user_from_doc(doc)

    def get_user(self, user_id: str) -> Optional[User]:
        """Look a user up by id; unknown or malformed ids return None."""
        if not user_id or not ObjectId.is_valid(user_id):
            return None
        try:
            doc = self._collection("users").find_one({"_id": ObjectId(user_id)})
        except PyMongoError as exc:
            logger.error("MongoDB user lookup failed: %s", exc)
            raise StoreError() from exc
        return _user_from_doc(doc) if doc else None

    # ── Searches ─────────────────────────────────────────────────────────────

    def add_search(self, user_id: str, term: str) -> SearchRecord:
        """Append one search event stamped with the current UTC time."""
        record = SearchRecord(user_id=user_id, term=term, timestamp=datetime.now(timezone.utc))
        try:
            self._collection("searches").insert_one(
                {
                    "user_id": ObjectId(user_id),
                    "term": record.term,
                    "timestamp": record.timestamp,
                }
            )
        except PyMongoError as exc:
            logger.error("MongoDB write failed for term %r: %s", term, exc)
            raise StoreError() from exc

        logger.info("Logged search %r for user %s.", term, user_id)
        return record

    def recent_searches(self, user_id: str, limit: int) -> list:
        """The user's own searches, newest first, at most *limit* of them."""
        try:
            cursor = (
                self._collection("searches")
                .find({"user_id": ObjectId(user_id)}, {"_id": 0, "term": 1, "timestamp": 1})
                .sort([("timestamp", pymongo.DESCENDING), ("_id", pymongo.DESCENDING)])
                .limit(limit)
            )
            docs = list(cursor)
        except PyMongoError as exc:
            logger.error("MongoDB history read failed: %s", exc)
            raise StoreError() from exc

        return [
            SearchRecord(user_id=user_id, term=doc["term"], timestamp=doc["timestamp"])
            for doc in docs
        ]

    def top_terms(self, limit: int) -> list:
        """
        Group every search by exact term and return the *limit* most frequent.

        Equal counts are ordered by term so the ranking does not shift
        between calls.
        """
        pipeline = [
            {"$group": {"_id": "$term", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": limit},
            {"$project": {"_id": 0, "term": "$_id", "count": 1}},
        ]
        try:
            docs = list(self._collection("searches").aggregate(pipeline))
        except PyMongoError as exc:
            logger.error("MongoDB aggregation failed: %s", exc)
            raise StoreError() from exc

        return [TopSearchEntry(term=doc["term"], count=doc["count"]) for doc in docs]
