"""
app/api/routers/export_router.py

Weekly data export endpoint.

GET /api/analytics/export

Query parameters
----------------
format          : "json" | "csv"                  (default: "json")
date_from       : ISO date lower bound on week start (YYYY-MM-DD, inclusive)
date_to         : ISO date upper bound on week start (YYYY-MM-DD, inclusive)
include_targets : add monthlyTarget / targetValue columns (default: true)
stage_ids       : optional comma-separated CVJ stage ids
kpi_ids         : optional comma-separated KPI ids
limit           : optional row cap, never above EXPORT_MAX_ROWS

Responses
---------
CSV  → StreamingResponse, Content-Type: text/csv
       Content-Disposition: attachment; filename="kpi-data.csv"
       X-Row-Count, X-Export-Truncated ("true" when rows were cut at the cap)
JSON → JSONResponse
       Body: {"rows": int, "truncated": bool, "rowLimit": int,
              "fields": list[str], "data": list[dict]}
"""

from __future__ import annotations

import csv
import io
import logging
import uuid
from collections.abc import Iterator
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session

from app.api.dependencies import kpi_ids_query, stage_ids_query
from app.services.export_service import (
    ExportResult,
    ScorecardExportService,
    get_export_service,
)
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["export"])

_VALID_FORMATS = frozenset({"csv", "json"})
_CSV_FILENAME = "kpi-data.csv"


# ---------------------------------------------------------------------------
# Serialisation helpers (no business logic)
# ---------------------------------------------------------------------------


def _to_csv_streaming(result: ExportResult) -> StreamingResponse:
    """Stream *result* as a UTF-8 CSV file download."""

    def _generate() -> Iterator[str]:
        buf = io.StringIO()
        writer = csv.DictWriter(
            buf,
            fieldnames=result.fields,
            extrasaction="ignore",
            restval="",
            lineterminator="\r\n",
        )
        writer.writeheader()
        yield buf.getvalue()

        for row in result.rows:
            buf.seek(0)
            buf.truncate(0)
            writer.writerow({k: ("" if v is None else v) for k, v in row.items()})
            yield buf.getvalue()

    return StreamingResponse(
        content=_generate(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{_CSV_FILENAME}"',
            "X-Row-Count": str(len(result.rows)),
            "X-Export-Truncated": "true" if result.truncated else "false",
        },
    )


def _to_json_response(result: ExportResult) -> JSONResponse:
    return JSONResponse(
        content={
            "rows": len(result.rows),
            "truncated": result.truncated,
            "rowLimit": result.row_limit,
            "fields": result.fields,
            "data": result.rows,
        }
    )


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@router.get("/export", response_model=None, summary="Export weekly KPI data")
def export_weekly_data(
    output_format: str = Query(
        default="json",
        alias="format",
        description='Output format: "json" or "csv" (file download).',
    ),
    date_from: date = Query(..., description="Inclusive start date filter (YYYY-MM-DD)."),
    date_to: date = Query(..., description="Inclusive end date filter (YYYY-MM-DD)."),
    include_targets: bool = Query(default=True),
    stage_ids: list[uuid.UUID] | None = Depends(stage_ids_query),
    kpi_ids: list[uuid.UUID] | None = Depends(kpi_ids_query),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    service: ScorecardExportService = Depends(get_export_service),
) -> StreamingResponse | JSONResponse:
    if output_format not in _VALID_FORMATS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}.",
        )

    try:
        result = service.export(
            db,
            date_from=date_from,
            date_to=date_to,
            include_targets=include_targets,
            stage_ids=stage_ids,
            kpi_ids=kpi_ids,
            limit=limit,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info(
        "Export format=%r date_from=%s date_to=%s rows=%d",
        output_format, date_from, date_to, len(result.rows),
    )

    if output_format == "csv":
        return _to_csv_streaming(result)
    return _to_json_response(result)
