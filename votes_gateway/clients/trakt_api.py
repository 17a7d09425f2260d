"""Thin wrapper over the Trakt sync ratings endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from votes_gateway.core.config import TraktSettings
from votes_gateway.exceptions import RatingSubmitError
from votes_gateway.models import ItemType

logger = logging.getLogger(__name__)

API_VERSION = "2"


class TraktAPIClient:
    """Issue authenticated calls against ``/sync/ratings``."""

    def __init__(
        self,
        settings: TraktSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def _headers(self, access_token: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "trakt-api-version": API_VERSION,
            "trakt-api-key": self._settings.client_id or "",
            "Authorization": f"Bearer {access_token}",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.api_url,
            transport=self._transport,
            timeout=self._settings.http_timeout_seconds,
        )

    async def add_ratings(
        self, access_token: str, payload: dict[str, Any]
    ) -> dict[str, Any]:
        """POST ratings and return Trakt's summary unchanged."""
        try:
            async with self._client() as client:
                response = await client.post(
                    "/sync/ratings", json=payload, headers=self._headers(access_token)
                )
        except httpx.HTTPError as exc:
            raise RatingSubmitError(f"Ratings endpoint unreachable: {exc}") from exc

        if not response.is_success:
            detail = _error_detail(response)
            logger.warning(
                "Trakt rejected rating write (%s): %s", response.status_code, detail
            )
            raise RatingSubmitError(detail, status_code=response.status_code)
        return response.json()

    async def list_ratings(
        self, access_token: str, item_type: ItemType
    ) -> Optional[list[dict[str, Any]]]:
        """Return every rating of ``item_type``, or ``None`` when Trakt fails."""
        try:
            async with self._client() as client:
                response = await client.get(
                    f"/sync/ratings/{item_type.collection}",
                    headers=self._headers(access_token),
                )
        except httpx.HTTPError as exc:
            logger.warning("Ratings listing unreachable: %s", exc)
            return None

        if not response.is_success:
            logger.warning(
                "Trakt ratings listing failed with status %s", response.status_code
            )
            return None
        try:
            items = response.json()
        except ValueError:
            logger.warning("Trakt ratings listing returned a non-JSON body")
            return None
        return items if isinstance(items, list) else None


def _error_detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("error"):
        return body["error"]
    return body


__all__ = ["API_VERSION", "TraktAPIClient"]
