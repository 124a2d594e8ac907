"""
app/schemas/analytics.py

Response schemas for the scorecard analytics endpoints.

Most models validate straight from the frozen dataclasses produced by
``scorecard.aggregator`` and ``scorecard.rollup`` (``from_attributes``).
"""

from __future__ import annotations

from datetime import date

from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.weeks import WeekResponse
from scorecard.types import StatusLevel, UnitType


# ---------------------------------------------------------------------------
# Monthly scorecard lines
# ---------------------------------------------------------------------------


class StageRefResponse(CamelModel):
    id: str
    name: str
    display_order: int
    color_code: str


class ScorecardKpiResponse(CamelModel):
    id: str
    name: str
    unit_type: UnitType
    description: str | None = None
    default_monthly_target_value: float | None = None
    is_active: bool
    sub_category_id: str | None = None
    sub_category_name: str | None = None
    stage: StageRefResponse | None = None


class WeeklyEntryLineResponse(CamelModel):
    id: str | None = None
    week_id: str
    kpi_id: str
    actual_value: float | None = None
    notes: str | None = None


class ProcessedKpiMonthlyDataResponse(CamelModel):
    kpi: ScorecardKpiResponse
    month_id: str
    summed_actual_value: float
    previous_month_actual_value: float
    monthly_target_value: float | None
    status_percentage: float
    status: StatusLevel
    status_color: str
    status_text_color: str
    percentage_change_vs_previous_month: str
    weekly_entries: list[WeeklyEntryLineResponse] = Field(default_factory=list)


class DashboardResponse(CamelModel):
    month_id: str
    month_name: str
    processed_kpis: list[ProcessedKpiMonthlyDataResponse]


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------


class TopPerformerResponse(CamelModel):
    kpi_id: str
    kpi_name: str
    performance: float


class StagePerformanceResponse(CamelModel):
    stage: StageRefResponse
    kpi_count: int
    avg_performance: float
    top_performer: TopPerformerResponse | None = None


class ScorecardSummaryResponse(CamelModel):
    total_kpis: int
    kpis_on_track: int
    kpis_at_risk: int
    kpis_below_target: int
    overall_health_score: float


class MonthlyOverviewResponse(CamelModel):
    month: str
    month_name: str
    summary: ScorecardSummaryResponse
    stage_performance: list[StagePerformanceResponse]
    kpi_details: list[ProcessedKpiMonthlyDataResponse]


class StagePerformanceSummaryResponse(CamelModel):
    month_id: str
    month_name: str
    stage_performance: list[StagePerformanceResponse]
    overall_summary: ScorecardSummaryResponse


class KpiPerformanceMetricResponse(CamelModel):
    kpi: ScorecardKpiResponse
    actual_value: float
    target_value: float | None
    performance: float
    status: str


class KpiPerformanceResponse(CamelModel):
    month_id: str
    total_kpis: int
    kpi_metrics: list[KpiPerformanceMetricResponse]


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


class ComparisonSideResponse(CamelModel):
    month: str
    value: float
    performance: float


class ComparisonChangeResponse(CamelModel):
    absolute: float
    percentage: float
    trend: str


class KpiComparisonResponse(CamelModel):
    kpi_id: str
    kpi_name: str
    current: ComparisonSideResponse
    comparison: ComparisonSideResponse
    change: ComparisonChangeResponse


class ComparisonResponse(CamelModel):
    current_month: str
    comparison_month: str
    total_kpis: int
    comparisons: list[KpiComparisonResponse]


# ---------------------------------------------------------------------------
# Health score
# ---------------------------------------------------------------------------


class KpiHealthComponent(CamelModel):
    score: float
    on_track: int
    total: int


class StageScore(CamelModel):
    name: str
    performance: float


class AvgPerformanceComponent(CamelModel):
    score: float
    stages: list[StageScore]


class HealthComponents(CamelModel):
    kpi_health: KpiHealthComponent
    avg_performance: AvgPerformanceComponent


class RecommendationResponse(CamelModel):
    type: str
    title: str
    message: str


class HealthScoreResponse(CamelModel):
    month_id: str
    health_score: float
    components: HealthComponents
    recommendations: list[RecommendationResponse]


# ---------------------------------------------------------------------------
# Trends
# ---------------------------------------------------------------------------


class TrendPointResponse(CamelModel):
    period_id: str
    actual_value: float
    entry_count: int
    week_info: WeekResponse | None = None


# ---------------------------------------------------------------------------
# Period analysis
# ---------------------------------------------------------------------------


class MonthlyBreakdownResponse(CamelModel):
    month_id: str
    month_name: str
    year: int
    month: int
    total_days: int
    period_days: int
    weight_percentage: float
    weeks_in_month: list[WeekResponse] = Field(default_factory=list)


class PeriodAnalysisResponse(CamelModel):
    start_date: date
    end_date: date
    total_days: int
    monthly_breakdowns: list[MonthlyBreakdownResponse]
    is_period_cross_month: bool
    primary_month_id: str
    missing_target_months: list[str] = Field(default_factory=list)
