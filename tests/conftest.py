"""Shared fixtures: an in-memory record store and a mocked Unsplash client."""

from collections import Counter
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from app import create_app
from errors import StoreError
from models import ImageResult, IdentityInfo, SearchRecord, TopSearchEntry, User
from unsplash import UnsplashClient


class InMemoryStore:
    """Stand-in for MongoStore with the same public methods."""

    def __init__(self):
        self.users = {}
        self.searches = []
        self.fail = False
        self._epoch = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _check(self):
        if self.fail:
            raise StoreError()

    def ping(self):
        return not self.fail

    def upsert_user(self, identity: IdentityInfo) -> User:
        self._check()
        existing = next(
            (u for u in self.users.values() if u.google_id == identity.google_id), None
        )
        user_id = existing.id if existing else f"{len(self.users) + 1:024x}"
        user = User(
            id=user_id,
            google_id=identity.google_id,
            display_name=identity.display_name,
            email=identity.email,
            avatar=identity.avatar,
        )
        self.users[user_id] = user
        return user

    def get_user(self, user_id):
        self._check()
        return self.users.get(user_id)

    def add_search(self, user_id, term):
        self._check()
        # One second apart so ordering by timestamp is unambiguous.
        record = SearchRecord(
            user_id=user_id,
            term=term,
            timestamp=self._epoch + timedelta(seconds=len(self.searches)),
        )
        self.searches.append(record)
        return record

    def recent_searches(self, user_id, limit):
        self._check()
        own = [r for r in self.searches if r.user_id == user_id]
        return sorted(own, key=lambda r: r.timestamp, reverse=True)[:limit]

    def top_terms(self, limit):
        self._check()
        counts = Counter(r.term for r in self.searches)
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [TopSearchEntry(term=term, count=count) for term, count in ranked[:limit]]


def make_image(n: int = 1) -> ImageResult:
    return ImageResult(
        id=f"photo{n}",
        urls={"small": f"https://images.example/{n}-small.jpg"},
        alt_description="a cat on a sofa",
        description=None,
        author_name="Jane Doe",
        author_username="janedoe",
        likes=n,
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def images():
    client = MagicMock(spec=UnsplashClient)
    client.search_photos.return_value = (2, [make_image(1), make_image(2)])
    return client


@pytest.fixture
def identity():
    return MagicMock()


@pytest.fixture
def alice(store):
    return store.upsert_user(
        IdentityInfo(google_id="g-alice", display_name="Alice", email="alice@example.com",
                     avatar="https://img.example/alice.png")
    )


@pytest.fixture
def bob(store):
    return store.upsert_user(
        IdentityInfo(google_id="g-bob", display_name="Bob", email="bob@example.com")
    )


@pytest.fixture
def app(store, images, identity):
    return create_app(
        store=store,
        images=images,
        identity=identity,
        settings={
            "TESTING": True,
            "CLIENT_URL": "http://client.test",
            "SERVER_URL": "http://api.test",
        },
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    """Put a user id into the test client's session cookie."""
    def _login(user):
        with client.session_transaction() as sess:
            sess["user_id"] = user.id
    return _login
