"""
app/services/scorecard_service.py

Loads scorecard snapshots from the repositories and runs the pure
calculations in ``scorecard/`` over them.

Every public method is read-only; no session commits are issued.
The caller owns the session lifecycle.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy.orm import Session

from app.config import get_scorecard_settings
from db.models.kpi import KPI
from db.models.monthly_kpi_target import MonthlyKpiTarget
from db.models.week import Week
from db.models.weekly_data_entry import WeeklyDataEntry
from db.repositories.hierarchy_repository import HierarchyRepository
from db.repositories.monthly_target_repository import MonthlyTargetRepository
from db.repositories.week_repository import WeekRepository
from db.repositories.weekly_data_repository import WeeklyDataRepository
from scorecard.aggregator import StatusThresholds, aggregate_month
from scorecard.periods import (
    PeriodAnalysis,
    analyze_period,
    missing_target_months,
    previous_month_id,
)
from scorecard.rollup import (
    HealthScoreBreakdown,
    KpiComparison,
    MonthlyOverview,
    RankedKpi,
    build_monthly_overview,
    compare_months,
    filter_by_stage,
    health_score_breakdown,
    rank_kpi_performance,
)
from scorecard.types import (
    KpiSnapshot,
    ProcessedKpiMonthlyData,
    StageRef,
    TargetSnapshot,
    WeeklyEntrySnapshot,
    WeekSnapshot,
)

logger = logging.getLogger(__name__)

TREND_PERIODS = frozenset({"weekly", "monthly"})


# ---------------------------------------------------------------------------
# ORM → snapshot mapping
# ---------------------------------------------------------------------------


def kpi_snapshot(kpi: KPI) -> KpiSnapshot:
    sub_category = kpi.sub_category
    stage = sub_category.cvj_stage if sub_category is not None else None
    return KpiSnapshot(
        id=str(kpi.id),
        name=kpi.name,
        unit_type=kpi.unit_type,
        description=kpi.description,
        default_monthly_target_value=kpi.default_monthly_target_value,
        is_active=kpi.is_active,
        sub_category_id=str(sub_category.id) if sub_category is not None else None,
        sub_category_name=sub_category.name if sub_category is not None else None,
        stage=(
            StageRef(
                id=str(stage.id),
                name=stage.name,
                display_order=stage.display_order,
                color_code=stage.color_code,
            )
            if stage is not None
            else None
        ),
    )


def week_snapshot(week: Week) -> WeekSnapshot:
    return WeekSnapshot(
        id=week.id,
        year=week.year,
        week_number=week.week_number,
        month=week.month,
        start_date=week.start_date,
        end_date=week.end_date,
    )


def entry_snapshot(entry: WeeklyDataEntry) -> WeeklyEntrySnapshot:
    return WeeklyEntrySnapshot(
        id=str(entry.id),
        week_id=entry.week_id,
        kpi_id=str(entry.kpi_id),
        actual_value=entry.actual_value,
        notes=entry.notes,
    )


def target_snapshot(target: MonthlyKpiTarget) -> TargetSnapshot:
    return TargetSnapshot(
        kpi_id=str(target.kpi_id),
        month_id=target.month_id,
        target_value=target.target_value,
    )


# ---------------------------------------------------------------------------
# Result containers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrendPoint:
    period_id: str
    actual_value: float
    entry_count: int
    week_info: WeekSnapshot | None = None


@dataclass(frozen=True)
class PeriodAnalysisResult:
    analysis: PeriodAnalysis
    missing_target_months: list[str]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ScorecardService:
    """
    Monthly scorecards, rollups and trends over the stored data.
    """

    def __init__(self, session: Session, thresholds: StatusThresholds | None = None) -> None:
        self._hierarchy = HierarchyRepository(session)
        self._weeks = WeekRepository(session)
        self._weekly_data = WeeklyDataRepository(session)
        self._targets = MonthlyTargetRepository(session)
        self._thresholds = thresholds or get_scorecard_settings().thresholds

    @property
    def thresholds(self) -> StatusThresholds:
        return self._thresholds

    def process_month(self, month_id: str) -> list[ProcessedKpiMonthlyData]:
        """
        Aggregate every active KPI for ``month_id``.

        Loads only the weeks of the target and previous month, the entries
        recorded for those weeks and the target month's overrides.
        """
        prev_month_id = previous_month_id(month_id)
        kpis = [kpi_snapshot(k) for k in self._hierarchy.list_kpis(active=True)]
        weeks = [week_snapshot(w) for w in self._weeks.list_for_months([month_id, prev_month_id])]
        entries = [
            entry_snapshot(e) for e in self._weekly_data.list_for_weeks(w.id for w in weeks)
        ]
        targets = [target_snapshot(t) for t in self._targets.list_targets(month_id=month_id)]

        return aggregate_month(
            month_id,
            kpis,
            entries,
            targets,
            weeks,
            thresholds=self._thresholds,
        )

    def monthly_overview(self, month_id: str, stage_id: uuid.UUID | None = None) -> MonthlyOverview:
        results = self.process_month(month_id)
        return build_monthly_overview(
            month_id,
            results,
            self._thresholds,
            stage_id=str(stage_id) if stage_id is not None else None,
        )

    def kpi_performance(
        self,
        month_id: str,
        *,
        stage_id: uuid.UUID | None = None,
        kpi_ids: Sequence[uuid.UUID] | None = None,
    ) -> list[RankedKpi]:
        results = filter_by_stage(
            self.process_month(month_id),
            str(stage_id) if stage_id is not None else None,
        )
        wanted = [str(k) for k in kpi_ids] if kpi_ids else None
        return rank_kpi_performance(results, wanted)

    def comparison(
        self,
        current_month: str,
        comparison_month: str,
        *,
        kpi_id: uuid.UUID | None = None,
        stage_id: uuid.UUID | None = None,
    ) -> list[KpiComparison]:
        stage_key = str(stage_id) if stage_id is not None else None
        current = filter_by_stage(self.process_month(current_month), stage_key)
        other = filter_by_stage(self.process_month(comparison_month), stage_key)
        if kpi_id is not None:
            current = [r for r in current if r.kpi.id == str(kpi_id)]
            other = [r for r in other if r.kpi.id == str(kpi_id)]
        return compare_months(current, other)

    def health_score(self, month_id: str) -> HealthScoreBreakdown:
        return health_score_breakdown(self.monthly_overview(month_id), self._thresholds)

    def trends(
        self,
        date_from: date,
        date_to: date,
        *,
        period: str = "weekly",
        kpi_id: uuid.UUID | None = None,
        stage_id: uuid.UUID | None = None,
    ) -> list[TrendPoint]:
        """
        Summed actuals per week or per month for weeks starting in the range.

        Weekly points are ordered by week start date, monthly points by
        month id.  Missing actual values count as 0.
        """
        if period not in TREND_PERIODS:
            raise ValueError(f"Invalid period {period!r}. Must be one of: {sorted(TREND_PERIODS)}.")

        kpi_ids: list[uuid.UUID] | None = None
        if stage_id is not None:
            kpi_ids = [k.id for k in self._hierarchy.list_kpis(stage_id=stage_id)]
        if kpi_id is not None:
            kpi_ids = [k for k in kpi_ids if k == kpi_id] if kpi_ids is not None else [kpi_id]

        rows = self._weekly_data.list_between(date_from, date_to, kpi_ids=kpi_ids)

        sums: dict[str, float] = {}
        counts: dict[str, int] = {}
        week_info: dict[str, WeekSnapshot] = {}
        for entry, week in rows:
            key = week.month_id if period == "monthly" else week.id
            sums[key] = sums.get(key, 0.0) + (entry.actual_value or 0.0)
            counts[key] = counts.get(key, 0) + 1
            if period == "weekly":
                week_info.setdefault(key, week_snapshot(week))

        if period == "monthly":
            return [
                TrendPoint(period_id=key, actual_value=sums[key], entry_count=counts[key])
                for key in sorted(sums)
            ]
        # rows arrive ordered by week start, so insertion order is chronological
        return [
            TrendPoint(
                period_id=key,
                actual_value=sums[key],
                entry_count=counts[key],
                week_info=week_info[key],
            )
            for key in sums
        ]

    def period_analysis(
        self,
        start: date,
        end: date,
        *,
        kpi_id: uuid.UUID | None = None,
    ) -> PeriodAnalysisResult:
        weeks = [week_snapshot(w) for w in self._weeks.list_overlapping(start, end)]
        analysis = analyze_period(start, end, weeks)

        missing: list[str] = []
        if kpi_id is not None:
            targets = [
                target_snapshot(t)
                for t in self._targets.list_for_months(
                    b.month_id for b in analysis.monthly_breakdowns
                )
            ]
            missing = missing_target_months(analysis, str(kpi_id), targets)

        logger.debug(
            "Period analysis %s..%s months=%d cross_month=%s",
            start, end, len(analysis.monthly_breakdowns), analysis.is_period_cross_month,
        )
        return PeriodAnalysisResult(analysis=analysis, missing_target_months=missing)
