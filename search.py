"""
search.py — The search and aggregation service.

Every operation takes the caller's identity explicitly (``None`` means
anonymous) so authorization depends only on the arguments.  The service keeps
no state of its own; users and search records live in the store.
"""

import logging
from typing import Optional

from config import HISTORY_LIMIT, TOP_SEARCHES_LIMIT
from errors import InvalidArgument, Unauthorized
from models import SearchResult, User

logger = logging.getLogger(__name__)


class SearchService:
    """Logs searches, proxies them to Unsplash, and answers the two read views."""

    def __init__(self, store, images, history_limit: int = HISTORY_LIMIT,
                 top_limit: int = TOP_SEARCHES_LIMIT):
        self._store = store
        self._images = images
        self._history_limit = history_limit
        self._top_limit = top_limit

    def record_and_search(self, user: Optional[User], term) -> SearchResult:
        """
        Log the search, then ask Unsplash for matching photos.

        The record is written before the upstream call and stays written if
        that call fails.  Calling twice with the same term logs two searches.

        Raises:
            Unauthorized: no user.
            InvalidArgument: term missing, not a string, or blank.
            StoreError: the record could not be written.
            UpstreamError: Unsplash failed.
        """
        if user is None:
            raise Unauthorized()
        if not isinstance(term, str) or not term.strip():
            raise InvalidArgument()

        term = term.strip()
        self._store.add_search(user.id, term)

        total, images = self._images.search_photos(term)
        logger.info("Search %r by user %s returned %d images.", term, user.id, len(images))
        return SearchResult(term=term, total=total, results=images)

    def get_history(self, user: Optional[User]) -> list:
        """The caller's own most recent searches, newest first."""
        if user is None:
            raise Unauthorized()
        return self._store.recent_searches(user.id, self._history_limit)

    def get_top_searches(self) -> list:
        """Most frequent terms across all users; public."""
        return self._store.top_terms(self._top_limit)
