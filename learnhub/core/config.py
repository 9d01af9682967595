from pydantic_settings import BaseSettings
from typing import Optional, List
from pydantic import AnyHttpUrl, ValidationError, field_validator
import sys


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str

    ENVIRONMENT: str = "development"

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5000",
        "http://127.0.0.1:5173",
    ]
    FRONTEND_BASE_URL: Optional[AnyHttpUrl] = None

    # --- Auth configuration ---
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Performance instrumentation
    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    # Quizzes created together with a module start with this threshold.
    DEFAULT_PASSING_SCORE: int = 70

    # Bootstrap administrator, created at startup when both values are set.
    DEFAULT_ADMIN_USERNAME: Optional[str] = None
    DEFAULT_ADMIN_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _normalize_database_url(cls, value: str) -> str:
        """Ensure Postgres URLs always use the psycopg (v3) driver.

        Managed Postgres providers still hand out ``postgres://`` URLs, an
        alias SQLAlchemy no longer understands. Those, as well as the bare
        ``postgresql://`` and psycopg2 variants, are rewritten to
        ``postgresql+psycopg://``. SQLite and other backends are left alone.
        """

        if not isinstance(value, str):
            return value

        if "+psycopg://" in value:
            return value

        replacements = {
            "postgres://": "postgresql+psycopg://",
            "postgresql://": "postgresql+psycopg://",
            "postgresql+psycopg2://": "postgresql+psycopg://",
            "postgresql+asyncpg://": "postgresql+psycopg://",
        }

        for prefix, target in replacements.items():
            if value.startswith(prefix):
                return target + value[len(prefix) :]

        return value

    @field_validator("DEFAULT_PASSING_SCORE")
    @classmethod
    def _check_passing_score(cls, value: int) -> int:
        if not 1 <= value <= 100:
            raise ValueError("DEFAULT_PASSING_SCORE must be between 1 and 100")
        return value


def _log_settings_validation_error(exc: ValidationError) -> None:
    """Pretty-print missing or invalid environment variables.

    The Settings model is instantiated at import time, so a missing variable
    surfaces as a ValidationError deep inside an import chain. Printing each
    offending field first makes the cause obvious in server logs.
    """

    header = "Configuration error while loading environment variables:"
    print(header, file=sys.stderr)

    details = exc.errors()
    if details:
        for error in details:
            location = ".".join(str(part) for part in error.get("loc", ()))
            message = error.get("msg", "Unknown validation error")
            type_name = error.get("type")
            hint_parts = [message]
            if type_name:
                hint_parts.append(f"(type={type_name})")
            hint = " ".join(hint_parts)
            print(f"  - {location}: {hint}", file=sys.stderr)
    else:
        print(exc, file=sys.stderr)


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover - exercised at runtime
    _log_settings_validation_error(exc)
    raise
