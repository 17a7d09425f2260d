"""
Domain model for Trakt credentials persisted per user.
"""

from __future__ import annotations

import time
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field

DEFAULT_EXPIRES_IN = 86400


class CredentialRecord(BaseModel):
    """Access/refresh token pair plus the access token's expiry."""

    access_token: str = Field(..., min_length=1)
    refresh_token: str = Field(..., min_length=1)
    expires_at_unix: int = Field(
        ..., description="Unix timestamp at which ``access_token`` expires."
    )

    @classmethod
    def from_token_response(
        cls, payload: Mapping[str, Any], now: Optional[float] = None
    ) -> "CredentialRecord":
        """Build a record from a Trakt ``/oauth/token`` response body."""
        issued_at = int(now if now is not None else time.time())
        expires_in = payload.get("expires_in") or DEFAULT_EXPIRES_IN
        return cls(
            access_token=payload.get("access_token") or "",
            refresh_token=payload.get("refresh_token") or "",
            expires_at_unix=issued_at + int(expires_in),
        )

    def seconds_remaining(self, now: float) -> int:
        return self.expires_at_unix - int(now)


__all__ = ["CredentialRecord", "DEFAULT_EXPIRES_IN"]
