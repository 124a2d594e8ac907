"""
tests/test_rollup.py

Stage rollups, summaries, health scores, comparisons and rankings built on
top of aggregated scorecard lines.
"""

from __future__ import annotations

import pytest

from scorecard.aggregator import StatusThresholds, classify_status, status_classes
from scorecard.rollup import (
    build_monthly_overview,
    compare_months,
    filter_by_stage,
    health_score_breakdown,
    overall_health_score,
    rank_kpi_performance,
    stage_performance,
    summarize,
)
from scorecard.types import KpiSnapshot, ProcessedKpiMonthlyData, StageRef

AWARE = StageRef(id="s1", name="Aware", display_order=1)
ENGAGE = StageRef(id="s2", name="Engage", display_order=2)


def _line(
    kpi_id: str,
    percentage: float,
    *,
    stage: StageRef | None = AWARE,
    actual: float = 0.0,
    target: float | None = 100.0,
    month_id: str = "2025-05",
) -> ProcessedKpiMonthlyData:
    level = classify_status(percentage)
    bg_class, text_class = status_classes(level)
    return ProcessedKpiMonthlyData(
        kpi=KpiSnapshot(id=kpi_id, name=f"KPI {kpi_id}", stage=stage),
        month_id=month_id,
        summed_actual_value=actual,
        previous_month_actual_value=0.0,
        monthly_target_value=target,
        status_percentage=percentage,
        status=level,
        status_color=bg_class,
        status_text_color=text_class,
        percentage_change_vs_previous_month="0%",
    )


class TestSummary:
    def test_counts_by_status(self) -> None:
        lines = [_line("a", 120), _line("b", 95), _line("c", 80), _line("d", 10)]
        summary = summarize(lines)
        assert summary.total_kpis == 4
        assert summary.kpis_on_track == 2
        assert summary.kpis_at_risk == 1
        assert summary.kpis_below_target == 1

    def test_health_score_ignores_kpis_without_target(self) -> None:
        lines = [_line("a", 50), _line("b", 100, target=None), _line("c", 100, target=0)]
        assert overall_health_score(lines) == pytest.approx(50.0)

    def test_health_score_is_zero_without_targets(self) -> None:
        assert overall_health_score([_line("a", 100, target=None)]) == 0.0
        assert overall_health_score([]) == 0.0

    def test_custom_thresholds(self) -> None:
        summary = summarize([_line("a", 60)], StatusThresholds(green=50, yellow=20))
        assert summary.kpis_on_track == 1


class TestStagePerformance:
    def test_groups_in_first_seen_order(self) -> None:
        lines = [
            _line("a", 40, stage=ENGAGE),
            _line("b", 100, stage=AWARE),
            _line("c", 80, stage=ENGAGE),
        ]
        engage, aware = stage_performance(lines)
        assert engage.stage.name == "Engage"
        assert engage.kpi_count == 2
        assert engage.avg_performance == pytest.approx(60.0)
        assert engage.top_performer is not None
        assert engage.top_performer.kpi_id == "c"
        assert aware.kpi_count == 1

    def test_first_kpi_wins_ties(self) -> None:
        [stage] = stage_performance([_line("a", 90), _line("b", 90)])
        assert stage.top_performer.kpi_id == "a"

    def test_kpis_without_stage_are_left_out(self) -> None:
        assert stage_performance([_line("a", 90, stage=None)]) == []

    def test_filter_by_stage(self) -> None:
        lines = [_line("a", 40, stage=ENGAGE), _line("b", 100, stage=AWARE)]
        assert [r.kpi.id for r in filter_by_stage(lines, "s2")] == ["a"]
        assert len(filter_by_stage(lines, None)) == 2


class TestOverviewAndHealth:
    def test_overview_filters_by_stage(self) -> None:
        lines = [_line("a", 40, stage=ENGAGE), _line("b", 100, stage=AWARE)]
        overview = build_monthly_overview("2025-05", lines, stage_id="s1")
        assert overview.month_name == "May 2025"
        assert overview.summary.total_kpis == 1
        assert [s.stage.id for s in overview.stage_performance] == ["s1"]

    def test_weighted_health_score(self) -> None:
        lines = [_line("a", 100, stage=AWARE), _line("b", 50, stage=ENGAGE)]
        breakdown = health_score_breakdown(build_monthly_overview("2025-05", lines))
        # 70 % of 50 (one of two on track) + 30 % of mean(100, 50)
        assert breakdown.kpi_health_score == pytest.approx(50.0)
        assert breakdown.avg_stage_performance == pytest.approx(75.0)
        assert breakdown.health_score == pytest.approx(57.5)
        assert breakdown.stage_scores == [("Aware", 100.0), ("Engage", 50.0)]

    def test_recommendations(self) -> None:
        lines = [_line("a", 100, stage=AWARE), _line("b", 10, stage=ENGAGE)]
        breakdown = health_score_breakdown(build_monthly_overview("2025-05", lines))
        titles = [r.title for r in breakdown.recommendations]
        assert titles == ["KPIs Below Target", "Underperforming Stages"]
        assert "Engage" in breakdown.recommendations[1].message

    def test_excellent_performance_recommendation(self) -> None:
        breakdown = health_score_breakdown(build_monthly_overview("2025-05", [_line("a", 120)]))
        assert [r.type for r in breakdown.recommendations] == ["success"]

    def test_empty_month(self) -> None:
        breakdown = health_score_breakdown(build_monthly_overview("2025-05", []))
        assert breakdown.health_score == 0.0
        assert breakdown.recommendations == []


class TestComparison:
    def test_change_and_trend(self) -> None:
        current = [_line("a", 120, actual=120), _line("b", 50, actual=50)]
        previous = [_line("a", 100, actual=100), _line("b", 100, actual=100)]
        up, down = compare_months(current, previous)
        assert up.percentage_change == pytest.approx(20.0)
        assert up.trend == "up"
        assert down.absolute_change == pytest.approx(-50.0)
        assert down.trend == "down"

    def test_zero_baseline(self) -> None:
        [missing] = compare_months([_line("a", 10, actual=10)], [])
        assert missing.comparison_value == 0.0
        assert missing.percentage_change == 100.0
        [flat] = compare_months([_line("a", 0, actual=0)], [_line("a", 0, actual=0)])
        assert flat.percentage_change == 0.0
        assert flat.trend == "stable"


class TestRanking:
    def test_best_first_with_labels(self) -> None:
        ranked = rank_kpi_performance([_line("a", 50), _line("b", 150), _line("c", 80)])
        assert [r.line.kpi.id for r in ranked] == ["b", "c", "a"]
        assert [r.performance_label for r in ranked] == ["on_track", "at_risk", "below_target"]

    def test_restricted_to_kpi_ids(self) -> None:
        ranked = rank_kpi_performance([_line("a", 50), _line("b", 150)], kpi_ids=["a"])
        assert [r.line.kpi.id for r in ranked] == ["a"]
