"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from db.config import env_float, env_int, env_str
from scorecard.aggregator import StatusThresholds


@dataclass(frozen=True)
class ScorecardSettings:
    """
    Runtime settings for scorecard calculation and export.
    """

    green_threshold: float = 95.0
    yellow_threshold: float = 70.0
    export_max_rows: int = 100_000

    @property
    def thresholds(self) -> StatusThresholds:
        return StatusThresholds(green=self.green_threshold, yellow=self.yellow_threshold)


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@lru_cache(maxsize=1)
def get_scorecard_settings() -> ScorecardSettings:
    """
    Return cached scorecard settings from environment variables.

    Threshold ordering is not checked here; building ``thresholds`` raises
    ValueError when yellow is not below green.
    """

    return ScorecardSettings(
        green_threshold=env_float("STATUS_GREEN_THRESHOLD", 95.0),
        yellow_threshold=env_float("STATUS_YELLOW_THRESHOLD", 70.0),
        export_max_rows=max(1, env_int("EXPORT_MAX_ROWS", 100_000)),
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings(level=env_str("LOG_LEVEL", "INFO").upper())
