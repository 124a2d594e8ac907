"""
scorecard/aggregator.py

Monthly KPI aggregation.

Rolls weekly data entries up into one scorecard line per active KPI for a
target month and compares it with the KPI's monthly target and with the
previous month.

Formulas
--------
Actual            = Σ weekly actual_value (missing values count as 0) over the
                    weeks whose (year, month) equals the target month
Target            = monthly override → KPI default → None
Status %          = Actual / Target * 100           when Target > 0
                  = 100                             otherwise
Previous          = same sum over the previous month (0 when it has no weeks)
Change vs. prev.  = (Actual - Previous) / Previous * 100, one decimal, signed

Status levels
-------------
green  : status % >= green threshold (95 by default)
yellow : status % >= yellow threshold (70 by default)
red    : anything below

Everything here is a pure function of its arguments.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from scorecard.periods import parse_month_id, previous_month_id
from scorecard.types import (
    KpiSnapshot,
    ProcessedKpiMonthlyData,
    StatusLevel,
    TargetSnapshot,
    WeeklyEntrySnapshot,
    WeekSnapshot,
)

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class StatusThresholds:
    """Lower bounds (in percent of target) for the green and yellow levels."""

    green: float = 95.0
    yellow: float = 70.0

    def __post_init__(self) -> None:
        if self.yellow >= self.green:
            raise ValueError(
                f"Yellow threshold ({self.yellow}) must be below green threshold ({self.green})."
            )


DEFAULT_THRESHOLDS = StatusThresholds()

_STATUS_CLASSES: dict[StatusLevel, tuple[str, str]] = {
    StatusLevel.GREEN: ("bg-green-100", "text-green-700"),
    StatusLevel.YELLOW: ("bg-yellow-100", "text-yellow-700"),
    StatusLevel.RED: ("bg-red-100", "text-red-700"),
}


# ---------------------------------------------------------------------------
# Single-value helpers
# ---------------------------------------------------------------------------


def resolve_target(
    kpi: KpiSnapshot,
    month_id: str,
    targets: Iterable[TargetSnapshot],
) -> float | None:
    for target in targets:
        if target.kpi_id == kpi.id and target.month_id == month_id:
            return target.target_value
    return kpi.default_monthly_target_value


def status_percentage(actual: float | None, target: float | None) -> float:
    """
    Percentage of target achieved.

    Without a positive target there is nothing to miss, so the KPI counts as
    fully achieved (100) whatever the actual value.
    """
    if target is not None and target > 0:
        return (actual or 0.0) / target * 100
    return 100.0


def classify_status(
    percentage: float,
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> StatusLevel:
    if percentage >= thresholds.green:
        return StatusLevel.GREEN
    if percentage >= thresholds.yellow:
        return StatusLevel.YELLOW
    return StatusLevel.RED


def status_classes(level: StatusLevel) -> tuple[str, str]:
    """Return ``(background_class, text_class)`` for a status level."""
    return _STATUS_CLASSES[level]


def percentage_change(current: float | None, previous: float | None) -> str:
    """
    Month-over-month change as a display string.

    >>> percentage_change(120, 100)
    '+20.0%'
    >>> percentage_change(50, 0)
    '+∞%'
    """
    if current is None or previous is None:
        return NOT_AVAILABLE
    if previous == 0:
        if current > 0:
            return "+∞%"
        if current == 0:
            return "0%"
        return "-∞%"
    change = (current - previous) / previous * 100
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.1f}%"


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def aggregate_month(
    month_id: str,
    kpis: Sequence[KpiSnapshot],
    weekly_data: Sequence[WeeklyEntrySnapshot],
    targets: Sequence[TargetSnapshot],
    weeks: Sequence[WeekSnapshot],
    *,
    thresholds: StatusThresholds | None = None,
) -> list[ProcessedKpiMonthlyData]:
    """
    Produce monthly scorecard lines for every active KPI.

    Parameters
    ----------
    month_id:
        Target month as ``YYYY-MM``.  An empty value yields an empty list.
    kpis:
        KPI snapshots; inactive KPIs are skipped.
    weekly_data:
        Weekly entries for any weeks; only those in the target and previous
        month are used.
    targets:
        Monthly target overrides for any months.
    weeks:
        Week snapshots used to map ``week_id`` onto a month.

    Returns
    -------
    list[ProcessedKpiMonthlyData]
        One line per active KPI, in input order.

    Raises
    ------
    InvalidMonthIdError
        When ``month_id`` is not a ``YYYY-MM`` string.
    """
    if not month_id or not kpis:
        return []

    parse_month_id(month_id)
    thresholds = thresholds or DEFAULT_THRESHOLDS
    prev_month_id = previous_month_id(month_id)

    current_week_ids = {w.id for w in weeks if w.month_id == month_id}
    previous_week_ids = {w.id for w in weeks if w.month_id == prev_month_id}

    current_entries: dict[str, list[WeeklyEntrySnapshot]] = defaultdict(list)
    previous_sums: dict[str, float] = defaultdict(float)
    for entry in weekly_data:
        if entry.week_id in current_week_ids:
            current_entries[entry.kpi_id].append(entry)
        elif entry.week_id in previous_week_ids:
            previous_sums[entry.kpi_id] += entry.actual_value or 0.0

    month_targets = [t for t in targets if t.month_id == month_id]

    results: list[ProcessedKpiMonthlyData] = []
    for kpi in kpis:
        if not kpi.is_active:
            continue

        entries = current_entries.get(kpi.id, [])
        actual = sum((e.actual_value or 0.0) for e in entries)
        previous = previous_sums.get(kpi.id, 0.0)
        target = resolve_target(kpi, month_id, month_targets)
        percentage = status_percentage(actual, target)
        level = classify_status(percentage, thresholds)
        bg_class, text_class = status_classes(level)

        results.append(
            ProcessedKpiMonthlyData(
                kpi=kpi,
                month_id=month_id,
                summed_actual_value=actual,
                previous_month_actual_value=previous,
                monthly_target_value=target,
                status_percentage=percentage,
                status=level,
                status_color=bg_class,
                status_text_color=text_class,
                percentage_change_vs_previous_month=percentage_change(actual, previous),
                weekly_entries=tuple(entries),
            )
        )

    logger.debug(
        "aggregate_month month=%s kpis=%d weeks_current=%d weeks_previous=%d",
        month_id, len(results), len(current_week_ids), len(previous_week_ids),
    )
    return results
