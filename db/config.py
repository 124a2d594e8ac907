"""
db/config.py

Environment handling shared by the API, the seed script and Alembic.

Values come from the process environment, topped up from `.env` and
`.env.local` at the project root. Variables already set in the process win
over file values.

Database URL resolution order
-----------------------------
1. DATABASE_URL
2. CLOUD_DATABASE_URL, when ENVIRONMENT is prod, production, staging or cloud
3. LOCAL_DATABASE_URL

Bare ``postgres://`` and ``postgresql://`` URLs are rewritten to the
``postgresql+psycopg://`` driver form.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILES = (".env", ".env.local")
_CLOUD_LIKE_ENVIRONMENTS = {"prod", "production", "staging", "cloud"}
_TRUTHY = {"1", "true", "yes", "on"}
_PSYCOPG_PREFIX = "postgresql+psycopg://"


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(root: Path | None = None) -> None:
    """Copy KEY=VALUE pairs from the project's env files into ``os.environ``."""
    base = root or _PROJECT_ROOT
    for filename in _ENV_FILES:
        env_path = base / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


# ---------------------------------------------------------------------------
# Typed readers
# ---------------------------------------------------------------------------


def env_str(name: str, default: str) -> str:
    """Read a string; blank values fall back to ``default``."""
    _load_env_once()
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_int(name: str, default: int) -> int:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def env_bool(name: str, default: bool = False) -> bool:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


# ---------------------------------------------------------------------------
# Database URL
# ---------------------------------------------------------------------------


def normalize_postgres_url(url: str) -> str:
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return _PSYCOPG_PREFIX + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """Return the scorecard database URL or raise RuntimeError if none is set."""
    load_env_files()

    candidates = [os.getenv("DATABASE_URL", "")]
    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    if environment in _CLOUD_LIKE_ENVIRONMENTS:
        candidates.append(os.getenv("CLOUD_DATABASE_URL", ""))
    candidates.append(os.getenv("LOCAL_DATABASE_URL", ""))

    for candidate in candidates:
        if candidate.strip():
            return normalize_postgres_url(candidate.strip())

    raise RuntimeError(
        "No scorecard database configured. Set DATABASE_URL, or "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL with ENVIRONMENT."
    )


# ---------------------------------------------------------------------------
# Engine settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection and pool settings for the scorecard engine.

    ``statement_timeout_ms`` of 0 leaves the server default in place.
    """

    url: str
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle_seconds: int = 1800
    statement_timeout_ms: int = 0
    application_name: str = "kpi-scorecard"

    @property
    def is_postgres(self) -> bool:
        return self.url.startswith("postgresql")

    def connect_args(self) -> dict[str, Any]:
        """psycopg connection arguments tagging and bounding every session."""
        args: dict[str, Any] = {"application_name": self.application_name}
        if self.statement_timeout_ms > 0:
            args["options"] = f"-c statement_timeout={self.statement_timeout_ms}"
        return args


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
    return DatabaseSettings(
        url=resolve_database_url(),
        echo=env_bool("SQL_ECHO"),
        pool_size=max(1, env_int("DB_POOL_SIZE", 5)),
        max_overflow=max(0, env_int("DB_MAX_OVERFLOW", 10)),
        pool_recycle_seconds=env_int("DB_POOL_RECYCLE", 1800),
        statement_timeout_ms=max(0, env_int("DB_STATEMENT_TIMEOUT_MS", 0)),
        application_name=env_str("DB_APPLICATION_NAME", "kpi-scorecard"),
    )
