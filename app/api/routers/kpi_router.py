"""
app/api/routers/kpi_router.py

KPI definition endpoints.

KPIs are listed with their sub-category and stage so that clients can group
them by journey position without extra calls.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.dependencies import raise_for_repository_error
from app.schemas.hierarchy import (
    KPIBulkUpdateRequest,
    KPICreateRequest,
    KPIResponse,
    KPIUpdateRequest,
    KPIWithRelationsResponse,
)
from db.repositories.errors import ScorecardRepositoryError
from db.repositories.hierarchy_repository import HierarchyRepository
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/kpis", tags=["kpis"])

_NULLABLE_FIELDS = frozenset({"description", "default_monthly_target_value"})


def _changes(body: KPIUpdateRequest) -> dict[str, Any]:
    """Fields explicitly sent; ``null`` only clears nullable columns."""
    return {
        key: value
        for key, value in body.model_dump(exclude_unset=True, exclude={"id"}).items()
        if value is not None or key in _NULLABLE_FIELDS
    }


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


@router.get("", response_model=list[KPIWithRelationsResponse])
def list_kpis(
    stage_id: uuid.UUID | None = Query(default=None),
    sub_category_id: uuid.UUID | None = Query(default=None),
    active: bool | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[KPIWithRelationsResponse]:
    kpis = HierarchyRepository(db).list_kpis(
        stage_id=stage_id,
        sub_category_id=sub_category_id,
        active=active,
    )
    return [KPIWithRelationsResponse.model_validate(k) for k in kpis]


@router.get("/{kpi_id}", response_model=KPIWithRelationsResponse)
def get_kpi(kpi_id: uuid.UUID, db: Session = Depends(get_db)) -> KPIWithRelationsResponse:
    try:
        kpi = HierarchyRepository(db).require_kpi(kpi_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return KPIWithRelationsResponse.model_validate(kpi)


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


@router.post("", response_model=KPIResponse, status_code=status.HTTP_201_CREATED)
def create_kpi(body: KPICreateRequest, db: Session = Depends(get_db)) -> KPIResponse:
    """
    Create a KPI under an existing sub-category.

    Raises HTTP 404 if the sub-category does not exist.
    """
    repo = HierarchyRepository(db)
    try:
        repo.require_sub_category(body.sub_category_id)
        kpi = repo.create_kpi(**body.model_dump())
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    logger.info("KPI created id=%s name=%r", kpi.id, kpi.name)
    return KPIResponse.model_validate(kpi)


@router.patch("/bulk-update", response_model=list[KPIResponse])
def bulk_update_kpis(
    body: KPIBulkUpdateRequest,
    db: Session = Depends(get_db),
) -> list[KPIResponse]:
    """
    Apply several KPI updates in one transaction.

    Every referenced KPI and sub-category must exist; otherwise HTTP 404
    names the missing ids and nothing is changed.
    """
    repo = HierarchyRepository(db)
    try:
        kpis = repo.require_kpis(item.id for item in body.updates)
        for sub_category_id in {u.sub_category_id for u in body.updates if u.sub_category_id}:
            repo.require_sub_category(sub_category_id)
        updated = [repo.update_kpi(kpis[item.id], _changes(item)) for item in body.updates]
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    logger.info("KPI bulk update applied count=%d", len(updated))
    return [KPIResponse.model_validate(k) for k in updated]


@router.put("/{kpi_id}", response_model=KPIResponse)
def update_kpi(
    kpi_id: uuid.UUID,
    body: KPIUpdateRequest,
    db: Session = Depends(get_db),
) -> KPIResponse:
    repo = HierarchyRepository(db)
    changes = _changes(body)
    try:
        kpi = repo.require_kpi(kpi_id)
        if "sub_category_id" in changes:
            repo.require_sub_category(changes["sub_category_id"])
        kpi = repo.update_kpi(kpi, changes)
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return KPIResponse.model_validate(kpi)


@router.patch("/{kpi_id}/toggle-active", response_model=KPIResponse)
def toggle_kpi_active(kpi_id: uuid.UUID, db: Session = Depends(get_db)) -> KPIResponse:
    repo = HierarchyRepository(db)
    try:
        kpi = repo.require_kpi(kpi_id)
        kpi = repo.update_kpi(kpi, {"is_active": not kpi.is_active})
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    logger.info("KPI id=%s is_active=%s", kpi.id, kpi.is_active)
    return KPIResponse.model_validate(kpi)


@router.delete("/{kpi_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_kpi(kpi_id: uuid.UUID, db: Session = Depends(get_db)) -> Response:
    """
    Delete a KPI along with its weekly data and monthly targets.
    """
    repo = HierarchyRepository(db)
    try:
        repo.delete_kpi(repo.require_kpi(kpi_id))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
