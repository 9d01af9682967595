"""Report the LearnHub configuration and fail when it cannot be loaded.

Usage::

    python -m scripts.check_env

Exit code 1 means a required variable (``DATABASE_URL``, ``SECRET_KEY``) is
missing or a value is invalid; :mod:`learnhub.core.config` has already
printed the offending fields to stderr by then.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pydantic import ValidationError
from sqlalchemy.engine.url import make_url

sys.path.append(str(Path(__file__).resolve().parents[1]))


def describe_settings(settings) -> list[str]:
    """Human readable summary lines, secrets masked."""

    lines = [
        f"Environment: {settings.ENVIRONMENT}",
        f"Database: {make_url(settings.DATABASE_URL).render_as_string(hide_password=True)}",
        f"Token lifetime: {settings.ACCESS_TOKEN_EXPIRE_MINUTES} minutes",
        f"CORS origins: {', '.join(settings.BACKEND_CORS_ORIGINS) or '-'}",
        f"Slow query threshold: {settings.SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS} ms",
        f"DEFAULT_PASSING_SCORE: {settings.DEFAULT_PASSING_SCORE}",
    ]

    username = settings.DEFAULT_ADMIN_USERNAME
    password = settings.DEFAULT_ADMIN_PASSWORD
    if username and password:
        lines.append(f"DEFAULT_ADMIN_USERNAME: {username} (created at startup if missing)")
    elif username or password:
        lines.append(
            "WARNING: set both DEFAULT_ADMIN_USERNAME and DEFAULT_ADMIN_PASSWORD "
            "or neither; no admin will be bootstrapped."
        )
    else:
        lines.append("DEFAULT_ADMIN_USERNAME: not set (no admin bootstrap)")
    return lines


def main() -> int:
    try:
        from learnhub.core.config import settings
    except ValidationError:
        print("Environment validation failed - see details above.", file=sys.stderr)
        return 1

    print("LearnHub environment OK.")
    for line in describe_settings(settings):
        print(f"- {line}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
