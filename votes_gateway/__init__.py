"""Stremio add-on gateway that records votes as Trakt ratings."""

__version__ = "1.0.0"
