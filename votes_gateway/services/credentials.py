"""
Lifecycle of per-user Trakt credentials: code exchange and refresh on demand.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from votes_gateway.exceptions import NoCredentialError
from votes_gateway.models import CredentialRecord

if TYPE_CHECKING:
    from votes_gateway.clients import RedisTokenStore, TraktOAuthClient

logger = logging.getLogger(__name__)


class TokenState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VALID = "valid"
    EXPIRING = "expiring"


class CredentialManager:
    """Manages access to persisted Trakt credentials."""

    # Tokens closer than this to expiry are refreshed before use.
    REFRESH_BUFFER_SECONDS = 30

    def __init__(
        self,
        store: "RedisTokenStore",
        oauth_client: "TraktOAuthClient",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._oauth = oauth_client
        self._clock = clock

    def token_state(
        self, record: Optional[CredentialRecord], now: Optional[float] = None
    ) -> TokenState:
        if record is None:
            return TokenState.UNAUTHENTICATED
        current = self._clock() if now is None else now
        if record.seconds_remaining(current) > self.REFRESH_BUFFER_SECONDS:
            return TokenState.VALID
        return TokenState.EXPIRING

    async def exchange_code(self, code: str, user_id: str) -> CredentialRecord:
        """Swap an authorization code for tokens and store them for ``user_id``."""
        token_payload = await self._oauth.exchange_authorization_code(code)
        record = CredentialRecord.from_token_response(token_payload, now=self._clock())
        await self._store.save(user_id, record)
        return record

    async def get_valid_token(self, user_id: str) -> Optional[CredentialRecord]:
        """Return a usable record, refreshing it first when close to expiry.

        ``None`` means the user is not connected. A rejected refresh raises
        ``RefreshError`` and leaves the stale record in the store.
        """
        record = await self._store.get(user_id)
        if self.token_state(record) is not TokenState.EXPIRING:
            return record

        logger.info("Refreshing Trakt token for user %s", user_id)
        token_payload = await self._oauth.refresh_token(record.refresh_token)
        refreshed = CredentialRecord.from_token_response(token_payload, now=self._clock())
        await self._store.save(user_id, refreshed)
        return refreshed

    async def ensure_valid_token(self, user_id: str) -> CredentialRecord:
        """Like :meth:`get_valid_token` but a missing record is an error."""
        record = await self.get_valid_token(user_id)
        if record is None:
            raise NoCredentialError(user_id)
        return record

    async def is_connected(self, user_id: str) -> bool:
        return await self._store.get(user_id) is not None

    async def disconnect(self, user_id: str) -> None:
        await self._store.delete(user_id)


__all__ = ["CredentialManager", "TokenState"]
