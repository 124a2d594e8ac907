"""
tests/test_periods.py

Month ids, week ids and cross-month period analysis.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from scorecard.periods import (
    InvalidMonthIdError,
    InvalidPeriodError,
    analyze_period,
    build_week_id,
    current_month_id,
    missing_target_months,
    month_name,
    parse_month_id,
    previous_month_id,
    week_from_dates,
)
from scorecard.types import TargetSnapshot, WeekSnapshot


class TestMonthIds:
    def test_parse(self) -> None:
        assert parse_month_id("2024-05") == (2024, 5)

    @pytest.mark.parametrize("month_id", ["", "2024-00", "24-05", "2024-05-01"])
    def test_parse_rejects_malformed(self, month_id) -> None:
        with pytest.raises(InvalidMonthIdError):
            parse_month_id(month_id)

    def test_invalid_month_id_is_a_value_error(self) -> None:
        assert issubclass(InvalidMonthIdError, ValueError)

    @pytest.mark.parametrize(
        ("month_id", "expected"),
        [("2024-05", "2024-04"), ("2024-01", "2023-12"), ("2000-12", "2000-11")],
    )
    def test_previous_month(self, month_id, expected) -> None:
        assert previous_month_id(month_id) == expected

    def test_month_name(self) -> None:
        assert month_name("2025-06") == "June 2025"

    def test_current_month_uses_given_day(self) -> None:
        assert current_month_id(date(2025, 2, 28)) == "2025-02"


class TestWeekIds:
    def test_build_week_id(self) -> None:
        assert build_week_id(date(2025, 5, 12), date(2025, 5, 18)) == "Week 20 [05/12-05/18]"

    def test_week_from_dates_takes_month_from_start(self) -> None:
        week = week_from_dates(date(2025, 4, 28), date(2025, 5, 4))
        assert week.id == "Week 18 [04/28-05/04]"
        assert (week.year, week.week_number, week.month) == (2025, 18, 4)
        assert week.month_id == "2025-04"

    def test_week_from_dates_rejects_reversed_range(self) -> None:
        with pytest.raises(InvalidPeriodError):
            week_from_dates(date(2025, 5, 4), date(2025, 4, 28))

    @pytest.mark.parametrize(
        ("start", "expected"),
        [
            (date(2023, 12, 31), (2023, 52, 12)),
            (date(2024, 12, 29), (2024, 52, 12)),
            (date(2024, 12, 30), (2025, 1, 1)),
            (date(2024, 12, 31), (2025, 1, 1)),
            (date(2025, 1, 1), (2025, 1, 1)),
            (date(2025, 1, 3), (2025, 1, 1)),
            (date(2021, 1, 1), (2020, 53, 12)),
            (date(2021, 1, 3), (2020, 53, 12)),
        ],
    )
    def test_year_boundary_uses_iso_year(self, start, expected) -> None:
        week = week_from_dates(start, start + timedelta(days=6))
        assert (week.year, week.week_number, week.month) == expected

    def test_new_year_week_does_not_collide_with_january(self) -> None:
        straddling = week_from_dates(date(2024, 12, 30), date(2025, 1, 5))
        january = week_from_dates(date(2024, 1, 1), date(2024, 1, 7))
        assert (straddling.year, straddling.week_number) == (2025, 1)
        assert (january.year, january.week_number) == (2024, 1)
        assert straddling.month_id == "2025-01"


class TestAnalyzePeriod:
    def test_single_month(self) -> None:
        analysis = analyze_period(date(2025, 5, 5), date(2025, 5, 11))
        assert analysis.total_days == 7
        assert analysis.is_period_cross_month is False
        assert analysis.primary_month_id == "2025-05"
        [breakdown] = analysis.monthly_breakdowns
        assert breakdown.period_days == 7
        assert breakdown.total_days == 31
        assert breakdown.weight_percentage == pytest.approx(100.0)

    def test_cross_month_weights(self) -> None:
        analysis = analyze_period(date(2025, 5, 26), date(2025, 6, 1))
        assert analysis.is_period_cross_month is True
        may, june = analysis.monthly_breakdowns
        assert (may.month_id, may.period_days) == ("2025-05", 6)
        assert (june.month_id, june.period_days) == ("2025-06", 1)
        assert may.weight_percentage + june.weight_percentage == pytest.approx(100.0)
        assert analysis.primary_month_id == "2025-05"

    def test_tie_picks_earliest_month(self) -> None:
        analysis = analyze_period(date(2025, 1, 31), date(2025, 2, 1))
        assert analysis.primary_month_id == "2025-01"

    def test_spans_year_boundary(self) -> None:
        analysis = analyze_period(date(2024, 12, 20), date(2025, 2, 10))
        assert [b.month_id for b in analysis.monthly_breakdowns] == [
            "2024-12",
            "2025-01",
            "2025-02",
        ]
        assert analysis.primary_month_id == "2025-01"
        assert analysis.monthly_breakdowns[1].total_days == 31

    def test_weeks_attach_to_every_month_they_overlap(self) -> None:
        straddling = WeekSnapshot("w22", 2025, 22, 6, date(2025, 5, 26), date(2025, 6, 1))
        inside = WeekSnapshot("w21", 2025, 21, 5, date(2025, 5, 19), date(2025, 5, 25))
        analysis = analyze_period(date(2025, 5, 19), date(2025, 6, 1), [straddling, inside])
        may, june = analysis.monthly_breakdowns
        assert [w.id for w in may.weeks_in_month] == ["w22", "w21"]
        assert [w.id for w in june.weeks_in_month] == ["w22"]

    def test_reversed_range_is_rejected(self) -> None:
        with pytest.raises(InvalidPeriodError):
            analyze_period(date(2025, 6, 1), date(2025, 5, 1))

    def test_missing_target_months(self) -> None:
        analysis = analyze_period(date(2025, 5, 26), date(2025, 6, 1))
        targets = [
            TargetSnapshot(kpi_id="k1", month_id="2025-05", target_value=10),
            TargetSnapshot(kpi_id="k2", month_id="2025-06", target_value=10),
        ]
        assert missing_target_months(analysis, "k1", targets) == ["2025-06"]
