"""
scorecard/types.py

Immutable snapshot types consumed and produced by the scorecard calculations.

The caller loads rows from the database and maps them into these dataclasses
before invoking :func:`scorecard.aggregator.aggregate_month`.  Nothing in the
``scorecard`` package touches a session or performs I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class UnitType(str, Enum):
    NUMBER = "NUMBER"
    PERCENTAGE = "PERCENTAGE"
    CURRENCY = "CURRENCY"
    DURATION_SECONDS = "DURATION_SECONDS"
    TEXT = "TEXT"


class StatusLevel(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StageRef:
    """Customer Value Journey stage a KPI rolls up into."""

    id: str
    name: str
    display_order: int = 0
    color_code: str = ""


@dataclass(frozen=True)
class KpiSnapshot:
    """
    One KPI together with its position in the journey hierarchy.

    ``stage`` is ``None`` only for orphaned rows; such KPIs are still
    aggregated but are left out of stage rollups.
    """

    id: str
    name: str
    unit_type: UnitType = UnitType.NUMBER
    description: str | None = None
    default_monthly_target_value: float | None = None
    is_active: bool = True
    sub_category_id: str | None = None
    sub_category_name: str | None = None
    stage: StageRef | None = None


@dataclass(frozen=True)
class WeekSnapshot:
    """
    A reporting week.

    ``year`` and ``month`` decide which month the whole week counts toward,
    independent of whether ``start_date``..``end_date`` crosses a boundary.
    """

    id: str
    year: int
    week_number: int
    month: int
    start_date: date
    end_date: date

    @property
    def month_id(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class WeeklyEntrySnapshot:
    week_id: str
    kpi_id: str
    actual_value: float | None = None
    notes: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class TargetSnapshot:
    kpi_id: str
    month_id: str
    target_value: float


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProcessedKpiMonthlyData:
    """
    Monthly scorecard line for a single KPI.

    Attributes
    ----------
    summed_actual_value:
        Sum of weekly actuals for weeks assigned to ``month_id``; ``0.0`` when
        nothing was recorded.
    previous_month_actual_value:
        Same sum for the preceding month; ``0.0`` when nothing was recorded
        or the month has no weeks.
    monthly_target_value:
        Month override if present, else the KPI default, else ``None``.
    status_percentage:
        ``actual / target * 100`` (unclamped) or ``100.0`` when there is no
        positive target.
    percentage_change_vs_previous_month:
        Display string such as ``"+20.0%"``, ``"+∞%"`` or ``"0%"``.
    """

    kpi: KpiSnapshot
    month_id: str
    summed_actual_value: float
    previous_month_actual_value: float
    monthly_target_value: float | None
    status_percentage: float
    status: StatusLevel
    status_color: str
    status_text_color: str
    percentage_change_vs_previous_month: str
    weekly_entries: tuple[WeeklyEntrySnapshot, ...] = field(default_factory=tuple)

    @property
    def has_target(self) -> bool:
        return self.monthly_target_value is not None and self.monthly_target_value > 0
