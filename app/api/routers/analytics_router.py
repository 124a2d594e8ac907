"""
app/api/routers/analytics_router.py

Scorecard analytics endpoints.

GET /api/analytics/dashboard/{month_id}
GET /api/analytics/monthly-overview   ?month&stage_id
GET /api/analytics/trends             ?date_from&date_to&period&kpi_id&stage_id
GET /api/analytics/kpi-performance    ?month_id&stage_id&kpi_ids
GET /api/analytics/stage-performance  ?month_id
GET /api/analytics/comparison         ?current_month&comparison_month&kpi_id&stage_id
GET /api/analytics/health-score       ?month_id
GET /api/analytics/period-analysis    ?start&end&kpi_id

Month parameters default to the current calendar month.  All calculation
lives in ScorecardService and ``scorecard/``; the router only handles HTTP
plumbing.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from app.api.dependencies import get_scorecard_service, kpi_ids_query
from app.schemas.analytics import (
    AvgPerformanceComponent,
    ComparisonChangeResponse,
    ComparisonResponse,
    ComparisonSideResponse,
    DashboardResponse,
    HealthComponents,
    HealthScoreResponse,
    KpiComparisonResponse,
    KpiHealthComponent,
    KpiPerformanceMetricResponse,
    KpiPerformanceResponse,
    MonthlyBreakdownResponse,
    MonthlyOverviewResponse,
    PeriodAnalysisResponse,
    ProcessedKpiMonthlyDataResponse,
    RecommendationResponse,
    ScorecardKpiResponse,
    ScorecardSummaryResponse,
    StagePerformanceResponse,
    StagePerformanceSummaryResponse,
    StageScore,
    TrendPointResponse,
)
from app.schemas.base import MONTH_ID_PATTERN
from app.services.scorecard_service import TREND_PERIODS, ScorecardService
from scorecard.periods import InvalidPeriodError, current_month_id, month_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


def _month_query(name: str):
    return Query(
        default=None,
        alias=name,
        pattern=MONTH_ID_PATTERN,
        description="Month as YYYY-MM; defaults to the current month.",
    )


# ---------------------------------------------------------------------------
# Monthly scorecards
# ---------------------------------------------------------------------------


@router.get("/dashboard/{month_id}", response_model=DashboardResponse)
def get_dashboard(
    month_id: str = Path(..., pattern=MONTH_ID_PATTERN),
    service: ScorecardService = Depends(get_scorecard_service),
) -> DashboardResponse:
    """Every active KPI's monthly scorecard line for ``month_id``."""
    results = service.process_month(month_id)
    return DashboardResponse(
        month_id=month_id,
        month_name=month_name(month_id),
        processed_kpis=[ProcessedKpiMonthlyDataResponse.model_validate(r) for r in results],
    )


@router.get("/monthly-overview", response_model=MonthlyOverviewResponse)
def get_monthly_overview(
    month: str | None = _month_query("month"),
    stage_id: uuid.UUID | None = Query(default=None),
    service: ScorecardService = Depends(get_scorecard_service),
) -> MonthlyOverviewResponse:
    """
    Summary counts, per-stage performance and KPI details for one month,
    optionally restricted to a single stage.
    """
    overview = service.monthly_overview(month or current_month_id(), stage_id)
    logger.debug(
        "Monthly overview month=%s stage=%s kpis=%d",
        overview.month, stage_id, overview.summary.total_kpis,
    )
    return MonthlyOverviewResponse.model_validate(overview)


@router.get("/stage-performance", response_model=StagePerformanceSummaryResponse)
def get_stage_performance(
    month_id: str | None = _month_query("month_id"),
    service: ScorecardService = Depends(get_scorecard_service),
) -> StagePerformanceSummaryResponse:
    overview = service.monthly_overview(month_id or current_month_id())
    return StagePerformanceSummaryResponse(
        month_id=overview.month,
        month_name=overview.month_name,
        stage_performance=[
            StagePerformanceResponse.model_validate(s) for s in overview.stage_performance
        ],
        overall_summary=ScorecardSummaryResponse.model_validate(overview.summary),
    )


@router.get("/kpi-performance", response_model=KpiPerformanceResponse)
def get_kpi_performance(
    month_id: str | None = _month_query("month_id"),
    stage_id: uuid.UUID | None = Query(default=None),
    kpi_ids: list[uuid.UUID] | None = Depends(kpi_ids_query),
    service: ScorecardService = Depends(get_scorecard_service),
) -> KpiPerformanceResponse:
    """KPIs ranked by percentage of target achieved, best first."""
    month_id = month_id or current_month_id()
    ranked = service.kpi_performance(month_id, stage_id=stage_id, kpi_ids=kpi_ids)
    return KpiPerformanceResponse(
        month_id=month_id,
        total_kpis=len(ranked),
        kpi_metrics=[
            KpiPerformanceMetricResponse(
                kpi=ScorecardKpiResponse.model_validate(r.line.kpi),
                actual_value=r.line.summed_actual_value,
                target_value=r.line.monthly_target_value,
                performance=r.line.status_percentage,
                status=r.performance_label,
            )
            for r in ranked
        ],
    )


@router.get("/comparison", response_model=ComparisonResponse)
def get_comparison(
    current_month: str = Query(..., pattern=MONTH_ID_PATTERN),
    comparison_month: str = Query(..., pattern=MONTH_ID_PATTERN),
    kpi_id: uuid.UUID | None = Query(default=None),
    stage_id: uuid.UUID | None = Query(default=None),
    service: ScorecardService = Depends(get_scorecard_service),
) -> ComparisonResponse:
    comparisons = service.comparison(
        current_month,
        comparison_month,
        kpi_id=kpi_id,
        stage_id=stage_id,
    )
    return ComparisonResponse(
        current_month=current_month,
        comparison_month=comparison_month,
        total_kpis=len(comparisons),
        comparisons=[
            KpiComparisonResponse(
                kpi_id=c.kpi_id,
                kpi_name=c.kpi_name,
                current=ComparisonSideResponse(
                    month=current_month,
                    value=c.current_value,
                    performance=c.current_performance,
                ),
                comparison=ComparisonSideResponse(
                    month=comparison_month,
                    value=c.comparison_value,
                    performance=c.comparison_performance,
                ),
                change=ComparisonChangeResponse(
                    absolute=c.absolute_change,
                    percentage=c.percentage_change,
                    trend=c.trend,
                ),
            )
            for c in comparisons
        ],
    )


@router.get("/health-score", response_model=HealthScoreResponse)
def get_health_score(
    month_id: str | None = _month_query("month_id"),
    service: ScorecardService = Depends(get_scorecard_service),
) -> HealthScoreResponse:
    """
    Weighted health score: 70 % share of KPIs on track, 30 % mean stage
    performance, with recommendations.
    """
    breakdown = service.health_score(month_id or current_month_id())
    return HealthScoreResponse(
        month_id=breakdown.month_id,
        health_score=breakdown.health_score,
        components=HealthComponents(
            kpi_health=KpiHealthComponent(
                score=breakdown.kpi_health_score,
                on_track=breakdown.kpis_on_track,
                total=breakdown.total_kpis,
            ),
            avg_performance=AvgPerformanceComponent(
                score=breakdown.avg_stage_performance,
                stages=[
                    StageScore(name=name, performance=performance)
                    for name, performance in breakdown.stage_scores
                ],
            ),
        ),
        recommendations=[
            RecommendationResponse.model_validate(r) for r in breakdown.recommendations
        ],
    )


# ---------------------------------------------------------------------------
# Trends and periods
# ---------------------------------------------------------------------------


@router.get("/trends", response_model=list[TrendPointResponse])
def get_trends(
    date_from: date = Query(..., description="Inclusive lower bound on week start (YYYY-MM-DD)."),
    date_to: date = Query(..., description="Inclusive upper bound on week start (YYYY-MM-DD)."),
    period: str = Query(default="weekly", description='"weekly" or "monthly".'),
    kpi_id: uuid.UUID | None = Query(default=None),
    stage_id: uuid.UUID | None = Query(default=None),
    service: ScorecardService = Depends(get_scorecard_service),
) -> list[TrendPointResponse]:
    if period not in TREND_PERIODS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid period {period!r}. Must be one of: {sorted(TREND_PERIODS)}.",
        )
    if date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date_from must not be later than date_to.",
        )
    points = service.trends(
        date_from,
        date_to,
        period=period,
        kpi_id=kpi_id,
        stage_id=stage_id,
    )
    return [TrendPointResponse.model_validate(p) for p in points]


@router.get("/period-analysis", response_model=PeriodAnalysisResponse)
def get_period_analysis(
    start: date = Query(..., description="Inclusive period start (YYYY-MM-DD)."),
    end: date = Query(..., description="Inclusive period end (YYYY-MM-DD)."),
    kpi_id: uuid.UUID | None = Query(
        default=None,
        description="When given, list touched months lacking a target for this KPI.",
    ),
    service: ScorecardService = Depends(get_scorecard_service),
) -> PeriodAnalysisResponse:
    """
    Break a date range down by calendar month with day-count weights.

    Informational only; monthly scorecards assign whole weeks to the month
    stored on the week.
    """
    try:
        result = service.period_analysis(start, end, kpi_id=kpi_id)
    except InvalidPeriodError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    analysis = result.analysis
    return PeriodAnalysisResponse(
        start_date=analysis.start_date,
        end_date=analysis.end_date,
        total_days=analysis.total_days,
        monthly_breakdowns=[
            MonthlyBreakdownResponse.model_validate(b) for b in analysis.monthly_breakdowns
        ],
        is_period_cross_month=analysis.is_period_cross_month,
        primary_month_id=analysis.primary_month_id,
        missing_target_months=result.missing_target_months,
    )
