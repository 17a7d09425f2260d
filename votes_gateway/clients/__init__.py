"""Expose constructed client wrappers."""

from .token_store import RedisTokenStore
from .trakt_api import TraktAPIClient
from .trakt_auth import TraktOAuthClient

__all__ = [
    "RedisTokenStore",
    "TraktAPIClient",
    "TraktOAuthClient",
]
