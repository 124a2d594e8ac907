"""
scorecard/rollup.py

Stage-level and overall rollups over the aggregator's per-KPI output.

Overall health score
--------------------
Mean ``status_percentage`` over KPIs that have a positive monthly target.
KPIs without a real target always score 100 by convention and are left out so
they cannot inflate the score.

Weighted health breakdown
-------------------------
score = 0.7 * (share of KPIs on track * 100) + 0.3 * (mean stage performance)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from scorecard.aggregator import DEFAULT_THRESHOLDS, StatusThresholds
from scorecard.periods import month_name
from scorecard.types import ProcessedKpiMonthlyData, StageRef, StatusLevel

_KPI_HEALTH_WEIGHT = 0.7
_STAGE_PERFORMANCE_WEIGHT = 0.3
_EXCELLENT_HEALTH_SCORE = 90.0

_PERFORMANCE_LABELS: dict[StatusLevel, str] = {
    StatusLevel.GREEN: "on_track",
    StatusLevel.YELLOW: "at_risk",
    StatusLevel.RED: "below_target",
}


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TopPerformer:
    kpi_id: str
    kpi_name: str
    performance: float


@dataclass(frozen=True)
class StagePerformance:
    stage: StageRef
    kpi_count: int
    avg_performance: float
    top_performer: TopPerformer | None


@dataclass(frozen=True)
class ScorecardSummary:
    total_kpis: int
    kpis_on_track: int
    kpis_at_risk: int
    kpis_below_target: int
    overall_health_score: float


@dataclass(frozen=True)
class MonthlyOverview:
    month: str
    month_name: str
    summary: ScorecardSummary
    stage_performance: list[StagePerformance]
    kpi_details: list[ProcessedKpiMonthlyData]


@dataclass(frozen=True)
class Recommendation:
    type: str
    title: str
    message: str


@dataclass(frozen=True)
class HealthScoreBreakdown:
    month_id: str
    health_score: float
    kpi_health_score: float
    kpis_on_track: int
    total_kpis: int
    avg_stage_performance: float
    stage_scores: list[tuple[str, float]]
    recommendations: list[Recommendation] = field(default_factory=list)


@dataclass(frozen=True)
class KpiComparison:
    kpi_id: str
    kpi_name: str
    current_value: float
    current_performance: float
    comparison_value: float
    comparison_performance: float
    absolute_change: float
    percentage_change: float
    trend: str


@dataclass(frozen=True)
class RankedKpi:
    line: ProcessedKpiMonthlyData
    performance_label: str


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------


def filter_by_stage(
    results: Iterable[ProcessedKpiMonthlyData],
    stage_id: str | None,
) -> list[ProcessedKpiMonthlyData]:
    if not stage_id:
        return list(results)
    return [r for r in results if r.kpi.stage is not None and r.kpi.stage.id == stage_id]


def overall_health_score(results: Sequence[ProcessedKpiMonthlyData]) -> float:
    scored = [r.status_percentage for r in results if r.has_target]
    if not scored:
        return 0.0
    return sum(scored) / len(scored)


def summarize(
    results: Sequence[ProcessedKpiMonthlyData],
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> ScorecardSummary:
    on_track = sum(1 for r in results if r.status_percentage >= thresholds.green)
    at_risk = sum(
        1 for r in results if thresholds.yellow <= r.status_percentage < thresholds.green
    )
    return ScorecardSummary(
        total_kpis=len(results),
        kpis_on_track=on_track,
        kpis_at_risk=at_risk,
        kpis_below_target=len(results) - on_track - at_risk,
        overall_health_score=overall_health_score(results),
    )


def stage_performance(results: Sequence[ProcessedKpiMonthlyData]) -> list[StagePerformance]:
    """
    Group results by owning stage, in first-seen order.

    The top performer is the KPI with the highest status percentage; the first
    one encountered wins ties.
    """
    grouped: dict[str, list[ProcessedKpiMonthlyData]] = {}
    stages: dict[str, StageRef] = {}
    for result in results:
        stage = result.kpi.stage
        if stage is None:
            continue
        stages.setdefault(stage.id, stage)
        grouped.setdefault(stage.id, []).append(result)

    performances: list[StagePerformance] = []
    for stage_id, lines in grouped.items():
        best = lines[0]
        for line in lines[1:]:
            if line.status_percentage > best.status_percentage:
                best = line
        performances.append(
            StagePerformance(
                stage=stages[stage_id],
                kpi_count=len(lines),
                avg_performance=sum(row.status_percentage for row in lines) / len(lines),
                top_performer=TopPerformer(
                    kpi_id=best.kpi.id,
                    kpi_name=best.kpi.name,
                    performance=best.status_percentage,
                ),
            )
        )
    return performances


def build_monthly_overview(
    month_id: str,
    results: Sequence[ProcessedKpiMonthlyData],
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
    stage_id: str | None = None,
) -> MonthlyOverview:
    details = filter_by_stage(results, stage_id)
    return MonthlyOverview(
        month=month_id,
        month_name=month_name(month_id),
        summary=summarize(details, thresholds),
        stage_performance=stage_performance(details),
        kpi_details=details,
    )


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


def health_score_breakdown(
    overview: MonthlyOverview,
    thresholds: StatusThresholds = DEFAULT_THRESHOLDS,
) -> HealthScoreBreakdown:
    summary = overview.summary
    stages = overview.stage_performance

    kpi_health = (
        summary.kpis_on_track / summary.total_kpis * 100 if summary.total_kpis else 0.0
    )
    avg_stage = sum(s.avg_performance for s in stages) / len(stages) if stages else 0.0

    return HealthScoreBreakdown(
        month_id=overview.month,
        health_score=kpi_health * _KPI_HEALTH_WEIGHT + avg_stage * _STAGE_PERFORMANCE_WEIGHT,
        kpi_health_score=kpi_health,
        kpis_on_track=summary.kpis_on_track,
        total_kpis=summary.total_kpis,
        avg_stage_performance=avg_stage,
        stage_scores=[(s.stage.name, s.avg_performance) for s in stages],
        recommendations=_recommendations(summary, stages, thresholds),
    )


def _recommendations(
    summary: ScorecardSummary,
    stages: Sequence[StagePerformance],
    thresholds: StatusThresholds,
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []

    if summary.kpis_below_target > 0:
        recommendations.append(
            Recommendation(
                type="warning",
                title="KPIs Below Target",
                message=(
                    f"{summary.kpis_below_target} KPIs are performing below "
                    f"{thresholds.yellow:g}% of target. Review and optimize these metrics."
                ),
            )
        )

    weak_stages = [s.stage.name for s in stages if s.avg_performance < thresholds.yellow]
    if weak_stages:
        recommendations.append(
            Recommendation(
                type="alert",
                title="Underperforming Stages",
                message=f"{', '.join(weak_stages)} stages need attention.",
            )
        )

    if summary.overall_health_score >= _EXCELLENT_HEALTH_SCORE:
        recommendations.append(
            Recommendation(
                type="success",
                title="Excellent Performance",
                message="Overall performance is excellent. Continue current strategies.",
            )
        )

    return recommendations


def compare_months(
    current: Sequence[ProcessedKpiMonthlyData],
    comparison: Sequence[ProcessedKpiMonthlyData],
) -> list[KpiComparison]:
    """
    Pair each current-month line with the same KPI in the comparison month.

    KPIs missing from the comparison month compare against zero.  With a zero
    baseline the change is 100 % when the current value is positive, else 0 %.
    """
    by_kpi = {line.kpi.id: line for line in comparison}
    comparisons: list[KpiComparison] = []
    for line in current:
        other = by_kpi.get(line.kpi.id)
        current_value = line.summed_actual_value or 0.0
        comparison_value = other.summed_actual_value if other is not None else 0.0

        if comparison_value > 0:
            change = (current_value - comparison_value) / comparison_value * 100
        else:
            change = 100.0 if current_value > 0 else 0.0

        if change > 0:
            trend = "up"
        elif change < 0:
            trend = "down"
        else:
            trend = "stable"

        comparisons.append(
            KpiComparison(
                kpi_id=line.kpi.id,
                kpi_name=line.kpi.name,
                current_value=current_value,
                current_performance=line.status_percentage,
                comparison_value=comparison_value,
                comparison_performance=other.status_percentage if other is not None else 0.0,
                absolute_change=current_value - comparison_value,
                percentage_change=change,
                trend=trend,
            )
        )
    return comparisons


def rank_kpi_performance(
    results: Sequence[ProcessedKpiMonthlyData],
    kpi_ids: Iterable[str] | None = None,
) -> list[RankedKpi]:
    """Results sorted by status percentage, best first."""
    selected = list(results)
    if kpi_ids:
        wanted = set(kpi_ids)
        selected = [r for r in selected if r.kpi.id in wanted]
    selected.sort(key=lambda r: r.status_percentage, reverse=True)
    return [RankedKpi(line=r, performance_label=_PERFORMANCE_LABELS[r.status]) for r in selected]
