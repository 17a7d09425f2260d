"""Per-item meta and action cards surfaced to the Stremio client.

Every card opens an external link that passes through ``/start`` so the
browser's user cookie is resolved before the actual action runs.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote, urlencode

from votes_gateway.models.ratings import PRESET_SCORES, ItemType, normalize_external_id


def start_url(base_url: str, target: str) -> str:
    """Link that resolves the user id and then redirects to ``target``."""
    return f"{base_url}/start?{urlencode({'redirect': target})}"


def build_meta(host_type: str, item_id: str) -> dict[str, Any]:
    """Minimal description of an item; the client already has its own metadata."""
    external_id = normalize_external_id(item_id)
    return {
        "meta": {
            "id": external_id,
            "type": host_type,
            "name": external_id,
        }
    }


def build_streams(base_url: str, host_type: str, item_id: str) -> dict[str, Any]:
    """Connect, vote and view cards for one item."""
    external_id = quote(normalize_external_id(item_id), safe="")
    item_type = ItemType.from_host_type(host_type)

    streams: list[dict[str, Any]] = [
        {
            "name": "Trakt",
            "title": "Connect your Trakt account",
            "externalUrl": start_url(base_url, "/authorize"),
        }
    ]
    for label, score in PRESET_SCORES:
        streams.append(
            {
                "name": "Trakt vote",
                "title": f"{label} ({score}/10)",
                "externalUrl": start_url(
                    base_url, f"/vote/{item_type.value}/{external_id}/{score}"
                ),
            }
        )
    streams.append(
        {
            "name": "Trakt",
            "title": "View my rating",
            "externalUrl": start_url(
                base_url, f"/view/{external_id}?{urlencode({'type': item_type.value})}"
            ),
        }
    )
    return {"streams": streams}


__all__ = ["build_meta", "build_streams", "start_url"]
