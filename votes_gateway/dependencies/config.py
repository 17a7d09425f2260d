"""Settings provider used by the routes and overridable in tests."""

from votes_gateway.core.config import AppSettings, get_settings


def get_app_settings() -> AppSettings:
    """Return the process-wide settings built from the environment."""
    return get_settings()


__all__ = ["get_app_settings"]
