"""Static discovery document served at ``/manifest.json``."""

from __future__ import annotations

import copy
from typing import Any

MANIFEST: dict[str, Any] = {
    "id": "org.trakt.votes",
    "version": "1.0.0",
    "name": "Trakt Votes",
    "description": "Rate titles (good/average/bad) and record the vote on Trakt.",
    "resources": ["meta", "stream"],
    "types": ["movie", "series"],
    "idPrefixes": ["tt"],
    "catalogs": [],
    "behaviorHints": {
        "configurable": False,
        "configurationRequired": False,
    },
}


def build_manifest() -> dict[str, Any]:
    """Return a copy of the manifest that callers may modify."""
    return copy.deepcopy(MANIFEST)


__all__ = ["MANIFEST", "build_manifest"]
