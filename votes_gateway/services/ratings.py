"""
Rating writes and lookups on behalf of a connected user.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from votes_gateway.exceptions import InvalidRatingError
from votes_gateway.models import ItemType, RatingSubmission
from votes_gateway.models.ratings import normalize_external_id

if TYPE_CHECKING:
    from votes_gateway.clients import TraktAPIClient
    from votes_gateway.services.credentials import CredentialManager

logger = logging.getLogger(__name__)


def build_submission(item_type: str, external_id: str, score: int) -> RatingSubmission:
    """Validate raw request values. Raises ``InvalidRatingError``."""
    try:
        kind = ItemType.from_host_type(item_type)
    except ValueError as exc:
        raise InvalidRatingError(f"Unsupported item type: {item_type!r}") from exc
    try:
        return RatingSubmission(item_type=kind, external_id=external_id, score=score)
    except ValidationError as exc:
        fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
        if fields == ["score"]:
            reason = "score must be between 1 and 10"
        else:
            reason = f"invalid {', '.join(fields) or 'value'}"
        raise InvalidRatingError(f"Invalid rating for {external_id!r}: {reason}.") from exc


def find_rating(items: list[dict[str, Any]], external_id: str) -> Optional[int]:
    """Return the score of the first entry whose imdb id matches."""
    for item in items:
        media = item.get("movie") or item.get("show") or {}
        ids = media.get("ids") or {}
        if ids.get("imdb") == external_id:
            return item.get("rating")
    return None


class RatingsService:
    """Submit and read Trakt ratings using credentials kept fresh on demand."""

    def __init__(
        self, credentials: "CredentialManager", api_client: "TraktAPIClient"
    ) -> None:
        self._credentials = credentials
        self._api = api_client

    async def submit_rating(
        self, user_id: str, item_type: str, external_id: str, score: int
    ) -> dict[str, Any]:
        """Write a rating and return Trakt's response unchanged."""
        submission = build_submission(item_type, external_id, score)
        record = await self._credentials.ensure_valid_token(user_id)
        result = await self._api.add_ratings(record.access_token, submission.to_payload())
        logger.info(
            "User %s rated %s %s with %s",
            user_id,
            submission.item_type.value,
            submission.external_id,
            submission.score,
        )
        return result

    async def lookup_rating(
        self, user_id: str, item_type: str, external_id: str
    ) -> Optional[int]:
        """Return the user's score for an item, or ``None``.

        A missing credential, a failed listing and an unrated item all yield
        ``None``. A rejected token refresh raises ``RefreshError``.
        """
        try:
            kind = ItemType.from_host_type(item_type)
        except ValueError as exc:
            raise InvalidRatingError(f"Unsupported item type: {item_type!r}") from exc

        record = await self._credentials.get_valid_token(user_id)
        if record is None:
            return None
        items = await self._api.list_ratings(record.access_token, kind)
        if items is None:
            return None
        return find_rating(items, normalize_external_id(external_id))


__all__ = ["RatingsService", "build_submission", "find_rating"]
