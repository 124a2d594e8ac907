"""
scorecard/periods.py

Calendar helpers for month identifiers, week identifiers and periods that
span more than one month.

Month identifiers
-----------------
A month is addressed by a ``"YYYY-MM"`` string.  :func:`previous_month_id`
rolls January back into December of the previous year.

Week identifiers
----------------
Weeks are labelled from the ISO week number of their first day and their
MM/DD range, e.g. ``"Week 20 [05/12-05/18]"``.  A week is assigned wholesale
to the month of its first day.

Cross-month periods
-------------------
:func:`analyze_period` splits an arbitrary inclusive date range into its
calendar months and weights each month by the share of the period's days it
holds.  The result is informational; monthly sums never use these weights.
"""

from __future__ import annotations

import calendar
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from scorecard.types import TargetSnapshot, WeekSnapshot

_MONTH_ID_RE = re.compile(r"^(\d{4})-(\d{2})$")

MONTH_ID_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
"""Regex used at the HTTP boundary to validate ``YYYY-MM`` parameters."""


class InvalidMonthIdError(ValueError):
    """Raised when a month identifier is not a valid ``YYYY-MM`` string."""


class InvalidPeriodError(ValueError):
    """Raised when a period ends before it starts."""


# ---------------------------------------------------------------------------
# Month identifiers
# ---------------------------------------------------------------------------


def parse_month_id(month_id: str) -> tuple[int, int]:
    """Return ``(year, month)`` for a ``YYYY-MM`` string."""
    match = _MONTH_ID_RE.match(month_id or "")
    if match is None:
        raise InvalidMonthIdError(f"Invalid month id {month_id!r}; expected YYYY-MM.")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise InvalidMonthIdError(f"Invalid month id {month_id!r}; month must be 01-12.")
    return year, month


def format_month_id(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def previous_month_id(month_id: str) -> str:
    year, month = parse_month_id(month_id)
    if month == 1:
        return format_month_id(year - 1, 12)
    return format_month_id(year, month - 1)


def month_name(month_id: str) -> str:
    """``"2024-05"`` → ``"May 2024"``."""
    year, month = parse_month_id(month_id)
    return f"{calendar.month_name[month]} {year}"


def month_id_for(day: date) -> str:
    return format_month_id(day.year, day.month)


def current_month_id(today: date | None = None) -> str:
    return month_id_for(today or date.today())


# ---------------------------------------------------------------------------
# Week identifiers
# ---------------------------------------------------------------------------


def build_week_id(start: date, end: date) -> str:
    week_number = start.isocalendar()[1]
    return f"Week {week_number} [{start:%m/%d}-{end:%m/%d}]"


def week_from_dates(start: date, end: date) -> WeekSnapshot:
    """
    Build a week snapshot from its inclusive date range.

    Year and week number are the ISO pair of ``start``, so they stay unique
    across year boundaries. The month is ``start``'s month, except when the
    ISO year differs from the calendar year: 30 December 2024 opens ISO week
    1 of 2025 and counts toward January 2025, while 1 January 2021 closes
    ISO week 53 of 2020 and counts toward December 2020. A week that runs
    from 28 April to 4 May counts toward April.
    """
    if end < start:
        raise InvalidPeriodError(f"Week end {end} is before start {start}.")
    iso_year, week_number, _ = start.isocalendar()
    if iso_year > start.year:
        month = 1
    elif iso_year < start.year:
        month = 12
    else:
        month = start.month
    return WeekSnapshot(
        id=build_week_id(start, end),
        year=iso_year,
        week_number=week_number,
        month=month,
        start_date=start,
        end_date=end,
    )


# ---------------------------------------------------------------------------
# Cross-month period analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthlyBreakdown:
    month_id: str
    month_name: str
    year: int
    month: int
    total_days: int
    """Days in the calendar month."""
    period_days: int
    """Days of the analysed period that fall inside this month."""
    weight_percentage: float
    weeks_in_month: tuple[WeekSnapshot, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PeriodAnalysis:
    start_date: date
    end_date: date
    total_days: int
    monthly_breakdowns: tuple[MonthlyBreakdown, ...]
    is_period_cross_month: bool
    primary_month_id: str


def analyze_period(
    start: date,
    end: date,
    weeks: Iterable[WeekSnapshot] = (),
) -> PeriodAnalysis:
    """
    Break the inclusive range ``start``..``end`` down by calendar month.

    Each breakdown carries the number of period days inside the month and that
    count as a percentage of the whole period; the percentages sum to 100.
    ``weeks`` whose date range overlaps a month's slice of the period are
    attached to that breakdown.  The month with the largest weight is the
    primary month (the earliest one on ties).
    """
    if end < start:
        raise InvalidPeriodError(f"Period end {end} is before start {start}.")

    week_list = list(weeks)
    total_days = (end - start).days + 1
    breakdowns: list[MonthlyBreakdown] = []

    cursor = start
    while cursor <= end:
        days_in_month = calendar.monthrange(cursor.year, cursor.month)[1]
        month_end = date(cursor.year, cursor.month, days_in_month)
        slice_end = min(end, month_end)
        period_days = (slice_end - cursor).days + 1
        month_id = format_month_id(cursor.year, cursor.month)

        breakdowns.append(
            MonthlyBreakdown(
                month_id=month_id,
                month_name=month_name(month_id),
                year=cursor.year,
                month=cursor.month,
                total_days=days_in_month,
                period_days=period_days,
                weight_percentage=period_days / total_days * 100,
                weeks_in_month=tuple(
                    w for w in week_list
                    if w.start_date <= slice_end and w.end_date >= cursor
                ),
            )
        )
        cursor = month_end + timedelta(days=1)

    primary = breakdowns[0]
    for breakdown in breakdowns[1:]:
        if breakdown.weight_percentage > primary.weight_percentage:
            primary = breakdown

    return PeriodAnalysis(
        start_date=start,
        end_date=end,
        total_days=total_days,
        monthly_breakdowns=tuple(breakdowns),
        is_period_cross_month=len(breakdowns) > 1,
        primary_month_id=primary.month_id,
    )


def missing_target_months(
    analysis: PeriodAnalysis,
    kpi_id: str,
    targets: Sequence[TargetSnapshot],
) -> list[str]:
    """Month ids touched by the period that have no target override for ``kpi_id``."""
    covered = {t.month_id for t in targets if t.kpi_id == kpi_id}
    return [b.month_id for b in analysis.monthly_breakdowns if b.month_id not in covered]
