"""Redis-backed storage of per-user Trakt credentials."""

from __future__ import annotations

import logging
from typing import Optional

from redis import asyncio as redis_asyncio
from redis.exceptions import RedisError

from votes_gateway.exceptions import TokenStoreError
from votes_gateway.models import CredentialRecord
from votes_gateway.services.token_cipher import CredentialCipher

logger = logging.getLogger(__name__)


class RedisTokenStore:
    """One entry per user: ``<prefix><user id>`` -> serialized record."""

    def __init__(
        self,
        redis: Optional[redis_asyncio.Redis],
        cipher: CredentialCipher,
        key_prefix: str = "trakt:",
    ) -> None:
        self._redis = redis
        self._cipher = cipher
        self._prefix = key_prefix

    def key_for(self, user_id: str) -> str:
        return f"{self._prefix}{user_id}"

    def _connection(self) -> redis_asyncio.Redis:
        if self._redis is None:
            raise TokenStoreError("Redis is not configured; set REDIS_URL.")
        return self._redis

    async def save(self, user_id: str, record: CredentialRecord) -> None:
        """Overwrite the record stored for ``user_id``."""
        connection = self._connection()
        try:
            await connection.set(self.key_for(user_id), self._cipher.dumps(record))
        except RedisError as exc:
            logger.error("Failed to save credential for user %s: %s", user_id, exc)
            raise TokenStoreError(f"Failed to save credential: {exc}") from exc
        logger.info("Credential saved for user %s", user_id)

    async def get(self, user_id: str) -> Optional[CredentialRecord]:
        """Return the stored record, or ``None`` when missing or unreadable."""
        if self._redis is None:
            logger.warning("Redis is not configured; treating user %s as disconnected", user_id)
            return None
        try:
            raw = await self._redis.get(self.key_for(user_id))
        except RedisError as exc:
            logger.warning("Failed to read credential for user %s: %s", user_id, exc)
            return None
        if raw is None:
            return None
        try:
            return self._cipher.loads(raw)
        except ValueError as exc:
            logger.warning("Ignoring unreadable credential for user %s: %s", user_id, exc)
            return None

    async def delete(self, user_id: str) -> None:
        """Remove the record for ``user_id``. Missing keys are not an error."""
        connection = self._connection()
        try:
            await connection.delete(self.key_for(user_id))
        except RedisError as exc:
            logger.error("Failed to delete credential for user %s: %s", user_id, exc)
            raise TokenStoreError(f"Failed to delete credential: {exc}") from exc
        logger.info("Credential removed for user %s", user_id)


__all__ = ["RedisTokenStore"]
