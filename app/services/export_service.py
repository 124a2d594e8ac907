"""
app/services/export_service.py

Flat export of recorded weekly values for spreadsheets and BI tools.

One row per weekly data entry whose week starts inside the requested date
range.  With ``include_targets`` each row also carries the resolved monthly
target (override, else KPI default) and the raw override value for the
week's month.

No transformation logic lives in the router.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from app.config import get_scorecard_settings
from db.repositories.hierarchy_repository import HierarchyRepository
from db.repositories.monthly_target_repository import MonthlyTargetRepository
from db.repositories.weekly_data_repository import WeeklyDataRepository

logger = logging.getLogger(__name__)

BASE_FIELDS: list[str] = [
    "weekId",
    "weekStart",
    "weekEnd",
    "kpiId",
    "kpiName",
    "actualValue",
    "notes",
]
TARGET_FIELDS: list[str] = ["monthlyTarget", "targetValue"]


# ---------------------------------------------------------------------------
# Export result container
# ---------------------------------------------------------------------------


@dataclass
class ExportResult:
    """
    Flat tabular data ready for CSV or JSON serialisation.

    Attributes
    ----------
    rows:   Flat dict per row; all values are JSON-safe scalars or strings.
    fields: Ordered column names; fixed for a given ``include_targets`` flag.
    truncated: True when more rows matched than ``row_limit`` allowed.
    row_limit: Effective cap, the smaller of the requested limit and
               EXPORT_MAX_ROWS.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=list)
    truncated: bool = False
    row_limit: int | None = None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ScorecardExportService:
    """
    Read-only export of weekly data; the caller owns the session lifecycle.
    """

    def export(
        self,
        db: Session,
        *,
        date_from: date,
        date_to: date,
        include_targets: bool = True,
        stage_ids: Sequence[uuid.UUID] | None = None,
        kpi_ids: Sequence[uuid.UUID] | None = None,
        limit: int | None = None,
    ) -> ExportResult:
        """
        Build export rows ordered by week start date.

        Raises ValueError when ``date_from`` is after ``date_to``.
        """
        if date_from > date_to:
            raise ValueError("date_from must not be later than date_to.")

        max_rows = get_scorecard_settings().export_max_rows
        row_limit = min(limit, max_rows) if limit is not None else max_rows

        hierarchy = HierarchyRepository(db)
        kpis = {k.id: k for k in hierarchy.list_kpis()}
        wanted_stages = set(stage_ids) if stage_ids else None
        wanted_kpis = set(kpi_ids) if kpi_ids else None

        pairs = WeeklyDataRepository(db).list_between(date_from, date_to)

        overrides: dict[tuple[uuid.UUID, str], float] = {}
        if include_targets:
            month_ids = {week.month_id for _, week in pairs}
            for target in MonthlyTargetRepository(db).list_for_months(month_ids):
                overrides[(target.kpi_id, target.month_id)] = target.target_value

        rows: list[dict[str, Any]] = []
        truncated = False
        for entry, week in pairs:
            kpi = kpis.get(entry.kpi_id)
            if kpi is None:
                continue
            if wanted_kpis is not None and kpi.id not in wanted_kpis:
                continue
            if wanted_stages is not None and kpi.sub_category.cvj_stage_id not in wanted_stages:
                continue

            if len(rows) >= row_limit:
                truncated = True
                break

            row: dict[str, Any] = {
                "weekId": week.id,
                "weekStart": week.start_date.isoformat(),
                "weekEnd": week.end_date.isoformat(),
                "kpiId": str(kpi.id),
                "kpiName": kpi.name,
                "actualValue": entry.actual_value,
                "notes": entry.notes,
            }
            if include_targets:
                override = overrides.get((kpi.id, week.month_id))
                row["monthlyTarget"] = (
                    override if override is not None else kpi.default_monthly_target_value
                )
                row["targetValue"] = override
            rows.append(row)

        if truncated:
            logger.warning(
                "Export truncated at %d rows date_from=%s date_to=%s", row_limit, date_from, date_to
            )

        fields = BASE_FIELDS + TARGET_FIELDS if include_targets else list(BASE_FIELDS)
        return ExportResult(rows=rows, fields=fields, truncated=truncated, row_limit=row_limit)


# ---------------------------------------------------------------------------
# Dependency helper
# ---------------------------------------------------------------------------

_service: ScorecardExportService | None = None


def get_export_service() -> ScorecardExportService:
    global _service
    if _service is None:
        _service = ScorecardExportService()
    return _service
