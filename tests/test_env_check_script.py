"""Tests for the configuration check script."""

from __future__ import annotations

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from pathlib import Path

import pytest

from scripts import check_env

MANAGED_ENV_KEYS = [
    "TRAKT_CLIENT_ID",
    "TRAKT_CLIENT_SECRET",
    "TRAKT_REDIRECT_URI",
    "REDIS_URL",
    "ADDON_BASE_URL",
    "PORT",
    "TOKEN_ENCRYPTION_SECRET",
]


def _write_env(env_path: Path, **values: str) -> None:
    contents = "\n".join(f"{key}={value}" for key, value in values.items())
    env_path.write_text(contents + "\n", encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in MANAGED_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_main_requires_existing_env_file(tmp_path: Path) -> None:
    exit_code = check_env.main(["--env-file", str(tmp_path / ".missing-env")])

    assert exit_code == check_env.EXIT_RUNTIME_ERROR


def test_complete_env_file_passes_strict_check(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    _write_env(
        env_file,
        TRAKT_CLIENT_ID="abc",
        TRAKT_CLIENT_SECRET="secret",
        REDIS_URL="rediss://default:pw@redis.example.com:6379",
        ADDON_BASE_URL="https://votes.example.com",
    )

    assert check_env.main(["--env-file", str(env_file), "--strict"]) == check_env.EXIT_OK


def test_settings_derive_redirect_uri_from_base_url(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, PORT="8123")

    settings = check_env.load_settings(env_file)

    assert settings.addon_base_url == "http://localhost:8123"
    assert settings.trakt.redirect_uri == "http://localhost:8123/callback"


def test_missing_credentials_only_fail_in_strict_mode(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, TRAKT_CLIENT_ID="abc")

    assert check_env.main(["--env-file", str(env_file)]) == check_env.EXIT_OK
    assert "TRAKT_CLIENT_SECRET" in capsys.readouterr().err

    exit_code = check_env.main(["--env-file", str(env_file), "--strict"])
    assert exit_code == check_env.EXIT_MISSING_SETTINGS


def test_invalid_values_are_reported(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    _write_env(env_file, PORT="not-a-port")

    assert check_env.main(["--env-file", str(env_file)]) == check_env.EXIT_VALIDATION_ERROR


def test_working_directory_env_file_is_ignored(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    _write_env(
        workdir / ".env",
        TRAKT_CLIENT_SECRET="from-cwd",
        REDIS_URL="redis://cwd.example.com:6379",
    )
    checked = tmp_path / "checked.env"
    _write_env(checked, TRAKT_CLIENT_ID="abc")
    monkeypatch.chdir(workdir)

    settings = check_env.load_settings(checked)

    assert settings.trakt.client_secret is None
    assert settings.redis.url is None
    assert check_env.main(["--env-file", str(checked), "--strict"]) == check_env.EXIT_MISSING_SETTINGS
