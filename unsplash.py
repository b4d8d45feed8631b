"""
unsplash.py — Client for the Unsplash photo search API.

A search is a single GET to ``/search/photos`` authenticated with the app's
access key.  Unsplash answers with ``{"total", "total_pages", "results"}``;
each result is projected down to the handful of fields the client renders
(id, URL set, alt text, description, photographer, likes) and kept in the
order Unsplash returned them.

There is no retry and no caching: a failed call surfaces immediately as
``UpstreamError``.
"""

import logging

import requests

from config import PER_PAGE, REQUEST_TIMEOUT, UNSPLASH_ACCESS_KEY, UNSPLASH_API_URL
from errors import UpstreamError
from models import ImageResult

logger = logging.getLogger(__name__)

HEADERS: dict = {
    "Accept-Version": "v1",
    "Accept": "application/json",
}


def _to_image(raw: dict) -> ImageResult:
    """Project one raw Unsplash photo onto ImageResult."""
    author = raw.get("user") or {}
    return ImageResult(
        id=raw["id"],
        urls=raw.get("urls") or {},
        alt_description=raw.get("alt_description"),
        description=raw.get("description"),
        author_name=author.get("name"),
        author_username=author.get("username"),
        likes=raw.get("likes", 0),
    )


class UnsplashClient:
    """Query-by-term access to Unsplash photos."""

    def __init__(
        self,
        access_key: str = UNSPLASH_ACCESS_KEY,
        base_url: str = UNSPLASH_API_URL,
        timeout: int = REQUEST_TIMEOUT,
        session: requests.Session = None,
    ):
        self._access_key = access_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def search_photos(self, term: str, per_page: int = PER_PAGE) -> tuple:
        """
        Search Unsplash for *term*.

        Returns:
            (total, images) where *total* is Unsplash's total match count and
            *images* is a list of at most *per_page* ImageResult values.

        Raises:
            UpstreamError: on transport failure, a non-2xx status, or a body
                that is not the expected JSON shape.
        """
        url = f"{self._base_url}/search/photos"
        params = {"query": term, "per_page": per_page, "client_id": self._access_key}
        logger.info("[unsplash] GET %s query=%r", url, term)

        try:
            response = self._session.get(
                url, params=params, headers=HEADERS, timeout=self._timeout
            )
        except requests.RequestException as exc:
            logger.error("Unsplash request failed for %r: %s", term, exc)
            raise UpstreamError() from exc

        if not response.ok:
            logger.warning(
                "Unsplash answered %d for %r: %s", response.status_code, term, response.text[:200]
            )
            raise UpstreamError()

        try:
            data = response.json()
            images = [_to_image(raw) for raw in data["results"][:per_page]]
            total = int(data.get("total", len(images)))
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Unexpected Unsplash payload for %r: %s", term, exc)
            raise UpstreamError() from exc

        logger.info("[unsplash] %d/%d results for %r.", len(images), total, term)
        return total, images

    def close(self) -> None:
        self._session.close()
