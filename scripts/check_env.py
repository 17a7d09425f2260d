"""Report configuration gaps before starting the gateway.

The gateway starts even when Trakt or Redis credentials are missing (only the
static add-on routes work then). This tool loads an env file the same way the
service does and lists what is missing, so a deploy can fail early instead.

Example usages::

    # Print warnings but always succeed.
    python -m scripts.check_env --env-file /srv/trakt-votes/.env

    # Exit non-zero when anything required for voting is missing.
    python -m scripts.check_env --env-file /srv/trakt-votes/.env --strict
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import dotenv_values
from pydantic import ValidationError

from votes_gateway.core.config import (
    AppSettings,
    RedisSettings,
    SecuritySettings,
    TraktSettings,
    configuration_warnings,
)

EXIT_OK = 0
EXIT_MISSING_SETTINGS = 2
EXIT_VALIDATION_ERROR = 3
EXIT_RUNTIME_ERROR = 5


def load_settings(env_file: Path) -> AppSettings:
    """Build settings from ``env_file`` on top of the process environment.

    The working directory's ``.env`` is not consulted.
    """
    values = {key: value for key, value in dotenv_values(env_file).items() if value is not None}
    return AppSettings(
        **values,
        _env_file=None,
        trakt=TraktSettings(**values, _env_file=None),
        redis=RedisSettings(**values, _env_file=None),
        security=SecuritySettings(**values, _env_file=None),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check that Trakt and Redis settings are present."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env in the working directory).",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when any setting is missing.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(
            f"Environment file {env_file} does not exist. "
            "Ensure the path is correct or create it before running this tool.",
            file=sys.stderr,
        )
        return EXIT_RUNTIME_ERROR

    try:
        settings = load_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Invalid values detected:\n"
            f"{exc.json(indent=2)}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    warnings = configuration_warnings(settings)
    for warning in warnings:
        print(f"WARNING: {warning}", file=sys.stderr)
    if warnings and args.strict:
        return EXIT_MISSING_SETTINGS

    print(f"Add-on base URL: {settings.addon_base_url}")
    print(f"Trakt redirect URI: {settings.trakt.redirect_uri}")
    print(f"Credential encryption: {'on' if settings.security.token_encryption_secret else 'off'}")
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
