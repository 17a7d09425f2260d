"""
Trakt OAuth utilities.

These helpers build the consent URL and talk to the token endpoint for both
the authorization-code and refresh-token grants.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from votes_gateway.core.config import TraktSettings
from votes_gateway.exceptions import AuthExchangeError, RefreshError

logger = logging.getLogger(__name__)


def upstream_message(response: httpx.Response, fallback: str) -> str:
    """Pull the most descriptive error message out of a Trakt response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or fallback
    if isinstance(body, dict):
        for key in ("message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.text or fallback


class TraktOAuthClient:
    """Build Trakt authorization URLs and call the token endpoint."""

    def __init__(
        self,
        settings: TraktSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def build_authorization_url(self, state: str) -> str:
        """Construct the Trakt consent URL; ``state`` carries the user id."""
        params = {
            "response_type": "code",
            "client_id": self._settings.client_id or "",
            "redirect_uri": self._settings.redirect_uri or "",
            "state": state,
        }
        return f"{self._settings.authorize_url}?{urlencode(params)}"

    async def _post_token(self, payload: Dict[str, Any]) -> httpx.Response:
        body = {
            "client_id": self._settings.client_id,
            "client_secret": self._settings.client_secret,
            "redirect_uri": self._settings.redirect_uri,
            **payload,
        }
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._settings.http_timeout_seconds,
        ) as client:
            return await client.post(self._settings.token_url, json=body)

    async def exchange_authorization_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Returns the raw token payload (``access_token``, ``refresh_token``,
        ``expires_in``, ...).
        """
        try:
            response = await self._post_token(
                {"code": code, "grant_type": "authorization_code"}
            )
        except httpx.HTTPError as exc:
            raise AuthExchangeError(f"Token endpoint unreachable: {exc}") from exc

        if not response.is_success:
            message = upstream_message(response, "Failed exchanging code")
            logger.warning(
                "Trakt rejected authorization code (%s): %s",
                response.status_code,
                message,
            )
            raise AuthExchangeError(message, status_code=response.status_code)

        token_payload = response.json()
        if not token_payload.get("access_token") or not token_payload.get("refresh_token"):
            raise AuthExchangeError("Incomplete token payload returned from Trakt.")
        return token_payload

    async def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        """Trade a stored refresh token for a new token pair."""
        try:
            response = await self._post_token(
                {"refresh_token": refresh_token, "grant_type": "refresh_token"}
            )
        except httpx.HTTPError as exc:
            raise RefreshError(f"Token endpoint unreachable: {exc}") from exc

        if not response.is_success:
            message = upstream_message(response, "Failed to refresh token")
            logger.warning(
                "Trakt rejected refresh token (%s): %s", response.status_code, message
            )
            raise RefreshError(message, status_code=response.status_code)

        token_payload = response.json()
        if not token_payload.get("access_token") or not token_payload.get("refresh_token"):
            raise RefreshError("Incomplete refresh payload returned from Trakt.")
        return token_payload


__all__ = ["TraktOAuthClient", "upstream_message"]
