"""Navigable entity graphs for Picasa Web Albums feeds."""

from .client import PicasaClient, authorization_url
from .errors import (
    AuthenticationError,
    MissingSessionError,
    NotFoundError,
    PicasaAPIError,
    PicasaError,
    RateLimitError,
)
from .models import (
    Album,
    Author,
    FeedEntity,
    FetchState,
    Link,
    Photo,
    PhotoUrl,
    RecentPhotos,
    Search,
    ThumbnailUrl,
    User,
)
from .parser import parse_feed

__all__ = [
    "PicasaClient",
    "authorization_url",
    "parse_feed",
    "FeedEntity",
    "User",
    "RecentPhotos",
    "Album",
    "Search",
    "Photo",
    "Link",
    "Author",
    "PhotoUrl",
    "ThumbnailUrl",
    "FetchState",
    "PicasaError",
    "MissingSessionError",
    "PicasaAPIError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
]
