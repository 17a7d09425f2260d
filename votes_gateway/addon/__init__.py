"""Stremio add-on documents: manifest, meta and stream cards."""

from .manifest import MANIFEST, build_manifest
from .resources import build_meta, build_streams

__all__ = ["MANIFEST", "build_manifest", "build_meta", "build_streams"]
