"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_credential_cipher,
    get_credential_manager,
    get_ratings_service,
    get_redis_connection,
    get_token_store,
    get_trakt_api_client,
    get_trakt_oauth_client,
)
from .config import get_app_settings

__all__ = [
    "get_app_settings",
    "get_credential_cipher",
    "get_credential_manager",
    "get_ratings_service",
    "get_redis_connection",
    "get_token_store",
    "get_trakt_api_client",
    "get_trakt_oauth_client",
]
