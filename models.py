"""
models.py — The shapes of the data that flow between the store, the
Unsplash client and the API layer.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class User:
    """An account created on first Google login."""
    id: str                     # MongoDB ObjectId as a string
    google_id: str
    display_name: str
    email: str
    avatar: Optional[str] = None

    def to_public(self) -> dict:
        return {
            "id": self.id,
            "name": self.display_name,
            "email": self.email,
            "avatar": self.avatar,
        }


@dataclass
class IdentityInfo:
    """What Google tells us about the person who just logged in."""
    google_id: str
    display_name: str
    email: str
    avatar: Optional[str] = None


@dataclass
class SearchRecord:
    """One logged search event; stored verbatim, never updated."""
    user_id: str
    term: str
    timestamp: datetime

    def to_dict(self) -> dict:
        return {"term": self.term, "timestamp": self.timestamp.isoformat()}


@dataclass
class TopSearchEntry:
    term: str
    count: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ImageResult:
    """A single Unsplash photo, trimmed to the fields the client renders."""
    id: str
    urls: dict
    alt_description: Optional[str]
    description: Optional[str]
    author_name: Optional[str]
    author_username: Optional[str]
    likes: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "urls": self.urls,
            "alt_description": self.alt_description,
            "description": self.description,
            "user": {"name": self.author_name, "username": self.author_username},
            "likes": self.likes,
        }


@dataclass
class SearchResult:
    term: str
    total: int
    results: list = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "term": self.term,
            "total": self.total,
            "results": [image.to_dict() for image in self.results],
        }
