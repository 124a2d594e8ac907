"""
tests/test_config.py

Environment-driven settings.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from app.config import get_logging_settings, get_scorecard_settings
from db.config import get_database_settings, normalize_postgres_url, resolve_database_url


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_scorecard_settings.cache_clear()
    get_logging_settings.cache_clear()
    yield
    get_scorecard_settings.cache_clear()
    get_logging_settings.cache_clear()


def test_scorecard_defaults(monkeypatch) -> None:
    for name in ("STATUS_GREEN_THRESHOLD", "STATUS_YELLOW_THRESHOLD", "EXPORT_MAX_ROWS"):
        monkeypatch.delenv(name, raising=False)
    settings = get_scorecard_settings()
    assert settings.thresholds.green == 95.0
    assert settings.thresholds.yellow == 70.0
    assert settings.export_max_rows == 100_000


def test_thresholds_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("STATUS_GREEN_THRESHOLD", "90")
    monkeypatch.setenv("STATUS_YELLOW_THRESHOLD", "60")
    settings = get_scorecard_settings()
    assert (settings.thresholds.green, settings.thresholds.yellow) == (90.0, 60.0)


def test_unparseable_values_fall_back(monkeypatch) -> None:
    monkeypatch.setenv("STATUS_GREEN_THRESHOLD", "high")
    monkeypatch.setenv("EXPORT_MAX_ROWS", "lots")
    settings = get_scorecard_settings()
    assert settings.green_threshold == 95.0
    assert settings.export_max_rows == 100_000


def test_inverted_thresholds_are_rejected(monkeypatch) -> None:
    monkeypatch.setenv("STATUS_GREEN_THRESHOLD", "50")
    monkeypatch.setenv("STATUS_YELLOW_THRESHOLD", "80")
    with pytest.raises(ValueError):
        get_scorecard_settings().thresholds


def test_log_level_is_upper_cased(monkeypatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert get_logging_settings().level == "DEBUG"


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgres://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
        ("postgresql+psycopg://u:p@h/db", "postgresql+psycopg://u:p@h/db"),
    ],
)
def test_normalize_postgres_url(url, expected) -> None:
    assert normalize_postgres_url(url) == expected


def test_cloud_url_used_in_production(monkeypatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://cloud/db")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/db")
    assert resolve_database_url() == "postgresql+psycopg://cloud/db"


def test_direct_url_wins(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgresql://direct/db")
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://cloud/db")
    assert resolve_database_url() == "postgresql+psycopg://direct/db"


# ---------------------------------------------------------------------------
# Database settings
# ---------------------------------------------------------------------------


_DB_VARS = (
    "SQL_ECHO",
    "DB_POOL_SIZE",
    "DB_MAX_OVERFLOW",
    "DB_POOL_RECYCLE",
    "DB_STATEMENT_TIMEOUT_MS",
    "DB_APPLICATION_NAME",
)


@pytest.fixture()
def _database_env(monkeypatch) -> Iterator[None]:
    for name in _DB_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@h/scorecard")
    get_database_settings.cache_clear()
    yield
    get_database_settings.cache_clear()


@pytest.mark.usefixtures("_database_env")
class TestDatabaseSettings:
    def test_defaults(self) -> None:
        settings = get_database_settings()
        assert settings.url == "postgresql+psycopg://u:p@h/scorecard"
        assert (settings.pool_size, settings.max_overflow) == (5, 10)
        assert settings.echo is False
        assert settings.connect_args() == {"application_name": "kpi-scorecard"}

    def test_pool_and_timeout_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("DB_POOL_SIZE", "12")
        monkeypatch.setenv("DB_STATEMENT_TIMEOUT_MS", "5000")
        monkeypatch.setenv("SQL_ECHO", "yes")
        settings = get_database_settings()
        assert settings.pool_size == 12
        assert settings.echo is True
        assert settings.connect_args()["options"] == "-c statement_timeout=5000"

    def test_nonsense_pool_values_are_clamped(self, monkeypatch) -> None:
        monkeypatch.setenv("DB_POOL_SIZE", "0")
        monkeypatch.setenv("DB_MAX_OVERFLOW", "-3")
        settings = get_database_settings()
        assert (settings.pool_size, settings.max_overflow) == (1, 0)

    def test_missing_url_raises(self, monkeypatch) -> None:
        for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(RuntimeError):
            get_database_settings()
