"""
Typed DTOs accepted by the bulk upsert repository methods.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class WeeklyEntryUpsert:
    """
    One weekly value to create or overwrite.

    ``actual_value`` always replaces the stored value; ``notes`` only
    replaces stored notes when given.
    """

    week_id: str
    kpi_id: uuid.UUID
    actual_value: float | None = None
    notes: str | None = None


@dataclass(frozen=True)
class MonthlyTargetUpsert:
    kpi_id: uuid.UUID
    month_id: str
    target_value: float
