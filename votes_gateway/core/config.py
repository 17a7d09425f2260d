"""
Application configuration models and helpers.

Every setting is sourced from the environment (or a local ``.env`` file). Trakt
and Redis credentials are optional so the static add-on routes can be served
without them; :func:`configuration_warnings` reports what is missing.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    populate_by_name=True,
    extra="ignore",
)


class TraktSettings(BaseSettings):
    """Configuration required for talking to the Trakt OAuth and sync APIs."""

    client_id: Optional[str] = Field(None, alias="TRAKT_CLIENT_ID")
    client_secret: Optional[str] = Field(None, alias="TRAKT_CLIENT_SECRET")
    redirect_uri: Optional[str] = Field(
        None,
        alias="TRAKT_REDIRECT_URI",
        description="Defaults to ``{ADDON_BASE_URL}/callback`` when omitted.",
    )
    api_url: str = Field("https://api.trakt.tv", alias="TRAKT_API_URL")
    authorize_url: str = Field(
        "https://trakt.tv/oauth/authorize", alias="TRAKT_AUTHORIZE_URL"
    )
    http_timeout_seconds: float = Field(10.0, alias="TRAKT_HTTP_TIMEOUT")

    model_config = _ENV_CONFIG

    @property
    def token_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/oauth/token"

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class RedisSettings(BaseSettings):
    """Location of the key-value store holding credential records."""

    url: Optional[str] = Field(
        None,
        alias="REDIS_URL",
        description="redis:// or rediss:// URL, credentials included.",
    )
    key_prefix: str = Field("trakt:", alias="REDIS_KEY_PREFIX")

    model_config = _ENV_CONFIG


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    token_encryption_secret: Optional[str] = Field(
        None,
        alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored "
            "credential records. Records are stored as plain JSON without it."
        ),
    )

    model_config = _ENV_CONFIG


class AppSettings(BaseSettings):
    """Root settings object for the gateway."""

    environment: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    port: int = Field(7000, alias="PORT")
    addon_base_url: Optional[str] = Field(
        None,
        alias="ADDON_BASE_URL",
        description="Public URL the add-on is reachable at.",
    )
    trakt: TraktSettings = Field(default_factory=TraktSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    model_config = _ENV_CONFIG

    @model_validator(mode="after")
    def _fill_derived_urls(self) -> "AppSettings":
        """Derive the public base URL and OAuth redirect from the port."""
        if not self.addon_base_url:
            self.addon_base_url = f"http://localhost:{self.port}"
        self.addon_base_url = self.addon_base_url.rstrip("/")
        if not self.trakt.redirect_uri:
            self.trakt.redirect_uri = f"{self.addon_base_url}/callback"
        return self


def configuration_warnings(settings: AppSettings) -> list[str]:
    """Describe missing credentials that disable parts of the gateway."""
    warnings: list[str] = []
    if not settings.trakt.is_configured:
        warnings.append(
            "TRAKT_CLIENT_ID and TRAKT_CLIENT_SECRET are required to authorize users."
        )
    if not settings.redis.url:
        warnings.append("REDIS_URL is required to store user credentials.")
    return warnings


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "RedisSettings",
    "SecuritySettings",
    "TraktSettings",
    "configuration_warnings",
    "get_settings",
]
