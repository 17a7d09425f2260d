"""Error taxonomy shared by the clients, services and routes."""

from __future__ import annotations

from typing import Any


class GatewayError(Exception):
    """Base class for every failure the gateway maps to an HTTP response."""


class NoCredentialError(GatewayError):
    """Raised when a user never completed the Trakt authorization flow."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"No Trakt credential stored for user {user_id}.")
        self.user_id = user_id


class AuthExchangeError(GatewayError):
    """Raised when Trakt rejects an authorization code."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RefreshError(GatewayError):
    """Raised when Trakt rejects a refresh token. The stored record is kept."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RatingSubmitError(GatewayError):
    """Raised when Trakt rejects a rating write."""

    def __init__(self, detail: Any, status_code: int | None = None) -> None:
        super().__init__(str(detail))
        self.detail = detail
        self.status_code = status_code


class TokenStoreError(GatewayError):
    """Raised when the key-value store cannot persist or delete a record."""


class InvalidRatingError(GatewayError, ValueError):
    """Raised before any network call when a rating request is malformed."""


__all__ = [
    "AuthExchangeError",
    "GatewayError",
    "InvalidRatingError",
    "NoCredentialError",
    "RatingSubmitError",
    "RefreshError",
    "TokenStoreError",
]
