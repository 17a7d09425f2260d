"""
Value objects describing a rating write.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

MIN_SCORE = 1
MAX_SCORE = 10

# Scores offered as one-click votes, best first.
PRESET_SCORES: tuple[tuple[str, int], ...] = (
    ("Good", 8),
    ("Average", 5),
    ("Bad", 2),
)


class ItemType(str, Enum):
    """Item kinds understood by the Trakt ratings endpoints."""

    MOVIE = "movie"
    SHOW = "show"

    @classmethod
    def from_host_type(cls, value: str) -> "ItemType":
        """Map a Stremio content type (``movie``/``series``) to a Trakt type."""
        normalized = value.strip().lower()
        if normalized == "series":
            return cls.SHOW
        return cls(normalized)

    @property
    def collection(self) -> str:
        """Plural key used by the sync payloads and listing paths."""
        return f"{self.value}s"


def normalize_external_id(value: str) -> str:
    """Drop Stremio episode suffixes (``tt123:1:2`` -> ``tt123``)."""
    return value.split(":", 1)[0].strip()


class RatingSubmission(BaseModel):
    """A single rating headed for Trakt. Never persisted locally."""

    item_type: ItemType
    external_id: str = Field(..., min_length=1)
    score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)

    @field_validator("external_id", mode="before")
    @classmethod
    def _strip_suffix(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_external_id(value)
        return value

    def to_payload(self) -> dict[str, list[dict[str, Any]]]:
        """Render the body expected by ``POST /sync/ratings``."""
        entry = {"ids": {"imdb": self.external_id}, "rating": self.score}
        return {self.item_type.collection: [entry]}


__all__ = [
    "ItemType",
    "MAX_SCORE",
    "MIN_SCORE",
    "PRESET_SCORES",
    "RatingSubmission",
    "normalize_external_id",
]
