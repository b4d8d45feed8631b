"""
errors.py — Failure taxonomy shared by the store, the upstream clients and
the search service.

Every error carries a user-facing ``message`` and the HTTP ``status_code``
the API layer answers with.  Nothing here is retried; each request fails on
its own.
"""


class ServiceError(Exception):
    """Base class for every failure reported back to an API caller."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "Please log in to access this resource"


class InvalidArgument(ServiceError):
    status_code = 400
    default_message = "Search term is required"


class UpstreamError(ServiceError):
    """Unsplash was unreachable or answered with a non-success response."""

    status_code = 500
    default_message = "Failed to fetch images"


class StoreError(ServiceError):
    """MongoDB failed on a read or a write."""

    status_code = 500
    default_message = "Database operation failed"


class IdentityProviderError(ServiceError):
    """The Google code exchange or profile lookup failed."""

    status_code = 502
    default_message = "Authentication failed"
