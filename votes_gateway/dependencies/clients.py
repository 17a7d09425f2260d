"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from redis import asyncio as redis_asyncio

from votes_gateway.clients import RedisTokenStore, TraktAPIClient, TraktOAuthClient
from votes_gateway.core.config import get_settings
from votes_gateway.services import CredentialCipher, CredentialManager, RatingsService


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_redis_connection() -> Optional[redis_asyncio.Redis]:
    """Create the shared Redis connection pool, or ``None`` when unconfigured."""
    settings = _settings()
    if not settings.redis.url:
        return None
    return redis_asyncio.from_url(settings.redis.url, decode_responses=True)


@lru_cache()
def get_credential_cipher() -> CredentialCipher:
    """Provide the serializer that seals credential records at rest."""
    settings = _settings()
    return CredentialCipher(secret=settings.security.token_encryption_secret)


@lru_cache()
def get_token_store() -> RedisTokenStore:
    """Provide the per-user credential store."""
    settings = _settings()
    return RedisTokenStore(
        redis=get_redis_connection(),
        cipher=get_credential_cipher(),
        key_prefix=settings.redis.key_prefix,
    )


@lru_cache()
def get_trakt_oauth_client() -> TraktOAuthClient:
    """Create a singleton Trakt OAuth client."""
    return TraktOAuthClient(_settings().trakt)


@lru_cache()
def get_trakt_api_client() -> TraktAPIClient:
    """Create a singleton Trakt sync API client."""
    return TraktAPIClient(_settings().trakt)


def get_credential_manager() -> CredentialManager:
    """Build a credential manager over the shared store and OAuth client."""
    return CredentialManager(
        store=get_token_store(),
        oauth_client=get_trakt_oauth_client(),
    )


def get_ratings_service() -> RatingsService:
    """Build a ratings service using configured clients."""
    return RatingsService(
        credentials=get_credential_manager(),
        api_client=get_trakt_api_client(),
    )


__all__ = [
    "get_credential_cipher",
    "get_credential_manager",
    "get_ratings_service",
    "get_redis_connection",
    "get_token_store",
    "get_trakt_api_client",
    "get_trakt_oauth_client",
]
