"""
app/api/routers/monthly_target_router.py

Monthly KPI target override endpoints.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from app.api.dependencies import raise_for_repository_error
from app.schemas.base import MONTH_ID_PATTERN
from app.schemas.monthly_targets import (
    MonthlyTargetBulkRequest,
    MonthlyTargetCreateRequest,
    MonthlyTargetResponse,
    MonthlyTargetUpdateRequest,
)
from app.schemas.weekly_data import BulkWriteResponse
from db.repositories.errors import ScorecardRepositoryError
from db.repositories.hierarchy_repository import HierarchyRepository
from db.repositories.monthly_target_repository import MonthlyTargetRepository
from db.repositories.types import MonthlyTargetUpsert
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/monthly-targets", tags=["monthly-targets"])


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


@router.get("", response_model=list[MonthlyTargetResponse])
def list_monthly_targets(
    kpi_id: uuid.UUID | None = Query(default=None),
    month_id: str | None = Query(default=None, pattern=MONTH_ID_PATTERN),
    db: Session = Depends(get_db),
) -> list[MonthlyTargetResponse]:
    targets = MonthlyTargetRepository(db).list_targets(kpi_id=kpi_id, month_id=month_id)
    return [MonthlyTargetResponse.model_validate(t) for t in targets]


@router.get("/month/{month_id}", response_model=list[MonthlyTargetResponse])
def list_monthly_targets_for_month(
    month_id: str = Path(..., pattern=MONTH_ID_PATTERN),
    db: Session = Depends(get_db),
) -> list[MonthlyTargetResponse]:
    targets = MonthlyTargetRepository(db).list_targets(month_id=month_id)
    return [MonthlyTargetResponse.model_validate(t) for t in targets]


@router.get("/kpi/{kpi_id}", response_model=list[MonthlyTargetResponse])
def list_monthly_targets_for_kpi(
    kpi_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> list[MonthlyTargetResponse]:
    try:
        HierarchyRepository(db).require_kpi(kpi_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    targets = MonthlyTargetRepository(db).list_targets(kpi_id=kpi_id)
    return [MonthlyTargetResponse.model_validate(t) for t in targets]


@router.get("/{target_id}", response_model=MonthlyTargetResponse)
def get_monthly_target(
    target_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> MonthlyTargetResponse:
    try:
        target = MonthlyTargetRepository(db).require_target(target_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return MonthlyTargetResponse.model_validate(target)


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


@router.post("", response_model=MonthlyTargetResponse, status_code=status.HTTP_201_CREATED)
def create_monthly_target(
    body: MonthlyTargetCreateRequest,
    db: Session = Depends(get_db),
) -> MonthlyTargetResponse:
    """
    Set a target override for one KPI and month.

    Raises HTTP 404 for an unknown KPI and HTTP 409 when the month already
    has an override for the KPI.
    """
    try:
        HierarchyRepository(db).require_kpi(body.kpi_id)
        target = MonthlyTargetRepository(db).create_target(**body.model_dump())
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return MonthlyTargetResponse.model_validate(target)


@router.post("/bulk", response_model=BulkWriteResponse)
def bulk_upsert_monthly_targets(
    body: MonthlyTargetBulkRequest,
    db: Session = Depends(get_db),
) -> BulkWriteResponse:
    """
    Create or overwrite many target overrides in one transaction.

    HTTP 404 names every unknown KPI id; nothing is written in that case.
    """
    rows = [
        MonthlyTargetUpsert(kpi_id=t.kpi_id, month_id=t.month_id, target_value=t.target_value)
        for t in body.targets
    ]
    try:
        HierarchyRepository(db).require_kpis(r.kpi_id for r in rows)
        saved = MonthlyTargetRepository(db).bulk_upsert(rows)
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        logger.warning("Monthly target bulk upsert rejected: %s", exc)
        raise_for_repository_error(exc)
    return BulkWriteResponse(saved=len(saved))


@router.put("/{target_id}", response_model=MonthlyTargetResponse)
def update_monthly_target(
    target_id: uuid.UUID,
    body: MonthlyTargetUpdateRequest,
    db: Session = Depends(get_db),
) -> MonthlyTargetResponse:
    repo = MonthlyTargetRepository(db)
    try:
        target = repo.update_target(repo.require_target(target_id), body.model_dump())
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return MonthlyTargetResponse.model_validate(target)


@router.delete("/{target_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_monthly_target(target_id: uuid.UUID, db: Session = Depends(get_db)) -> Response:
    repo = MonthlyTargetRepository(db)
    try:
        repo.delete_target(repo.require_target(target_id))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
