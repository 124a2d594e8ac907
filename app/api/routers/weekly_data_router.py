"""
app/api/routers/weekly_data_router.py

Weekly data entry endpoints, including the transactional bulk upsert used
by the data-entry grid.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.api.dependencies import raise_for_repository_error
from app.schemas.base import MONTH_ID_PATTERN
from app.schemas.weekly_data import (
    BulkWriteResponse,
    WeeklyDataBulkRequest,
    WeeklyDataCreateRequest,
    WeeklyDataResponse,
    WeeklyDataUpdateRequest,
)
from db.repositories.errors import EntityNotFoundError, ScorecardRepositoryError
from db.repositories.hierarchy_repository import HierarchyRepository
from db.repositories.types import WeeklyEntryUpsert
from db.repositories.week_repository import WeekRepository
from db.repositories.weekly_data_repository import WeeklyDataRepository
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/weekly-data", tags=["weekly-data"])


def _to_responses(entries: list) -> list[WeeklyDataResponse]:
    return [WeeklyDataResponse.model_validate(e) for e in entries]


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


@router.get("", response_model=list[WeeklyDataResponse])
def list_weekly_data(
    week_id: str | None = Query(default=None),
    kpi_id: uuid.UUID | None = Query(default=None),
    month_id: str | None = Query(default=None, pattern=MONTH_ID_PATTERN),
    db: Session = Depends(get_db),
) -> list[WeeklyDataResponse]:
    entries = WeeklyDataRepository(db).list_entries(
        week_id=week_id,
        kpi_id=kpi_id,
        month_id=month_id,
    )
    return _to_responses(entries)


@router.get("/week/{week_id:path}", response_model=list[WeeklyDataResponse])
def list_weekly_data_for_week(
    week_id: str,
    db: Session = Depends(get_db),
) -> list[WeeklyDataResponse]:
    try:
        WeekRepository(db).require_week(week_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return _to_responses(WeeklyDataRepository(db).list_entries(week_id=week_id))


@router.get("/kpi/{kpi_id}", response_model=list[WeeklyDataResponse])
def list_weekly_data_for_kpi(
    kpi_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> list[WeeklyDataResponse]:
    try:
        HierarchyRepository(db).require_kpi(kpi_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return _to_responses(WeeklyDataRepository(db).list_entries(kpi_id=kpi_id))


@router.get("/{entry_id}", response_model=WeeklyDataResponse)
def get_weekly_data(entry_id: uuid.UUID, db: Session = Depends(get_db)) -> WeeklyDataResponse:
    try:
        entry = WeeklyDataRepository(db).require_entry(entry_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return WeeklyDataResponse.model_validate(entry)


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


@router.post("", response_model=WeeklyDataResponse, status_code=status.HTTP_201_CREATED)
def create_weekly_data(
    body: WeeklyDataCreateRequest,
    db: Session = Depends(get_db),
) -> WeeklyDataResponse:
    """
    Record one KPI value for one week.

    Raises HTTP 404 for an unknown week or KPI and HTTP 409 when a value
    already exists for the pair.
    """
    try:
        WeekRepository(db).require_week(body.week_id)
        HierarchyRepository(db).require_kpi(body.kpi_id)
        entry = WeeklyDataRepository(db).create_entry(**body.model_dump())
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return WeeklyDataResponse.model_validate(entry)


@router.post("/bulk", response_model=BulkWriteResponse)
def bulk_upsert_weekly_data(
    body: WeeklyDataBulkRequest,
    db: Session = Depends(get_db),
) -> BulkWriteResponse:
    """
    Create or overwrite many weekly values in one transaction.

    All referenced weeks and KPIs are checked before anything is written;
    HTTP 404 names every missing id and the whole batch is rejected.
    """
    missing: list[str] = []
    try:
        WeekRepository(db).require_weeks(e.week_id for e in body.entries)
    except EntityNotFoundError as exc:
        missing.append(str(exc))
    try:
        HierarchyRepository(db).require_kpis(e.kpi_id for e in body.entries)
    except EntityNotFoundError as exc:
        missing.append(str(exc))
    if missing:
        logger.warning("Weekly data bulk upsert rejected: %s", "; ".join(missing))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="; ".join(missing))

    rows = [
        WeeklyEntryUpsert(
            week_id=e.week_id,
            kpi_id=e.kpi_id,
            actual_value=e.actual_value,
            notes=e.notes,
        )
        for e in body.entries
    ]
    try:
        saved = WeeklyDataRepository(db).bulk_upsert(rows)
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return BulkWriteResponse(saved=len(saved))


@router.put("/{entry_id}", response_model=WeeklyDataResponse)
def update_weekly_data(
    entry_id: uuid.UUID,
    body: WeeklyDataUpdateRequest,
    db: Session = Depends(get_db),
) -> WeeklyDataResponse:
    repo = WeeklyDataRepository(db)
    try:
        entry = repo.update_entry(repo.require_entry(entry_id), body.model_dump(exclude_unset=True))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return WeeklyDataResponse.model_validate(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_weekly_data(entry_id: uuid.UUID, db: Session = Depends(get_db)) -> Response:
    repo = WeeklyDataRepository(db)
    try:
        repo.delete_entry(repo.require_entry(entry_id))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
