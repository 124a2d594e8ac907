"""
app/api/routers/cvj_stage_router.py

CVJ stage endpoints, including the sub-categories nested under a stage.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.dependencies import raise_for_repository_error
from app.schemas.hierarchy import (
    CVJStageCreateRequest,
    CVJStageResponse,
    CVJStageTreeResponse,
    CVJStageUpdateRequest,
    SubCategoryCreateRequest,
    SubCategoryResponse,
    SubCategoryUpdateRequest,
)
from db.repositories.errors import ScorecardRepositoryError
from db.repositories.hierarchy_repository import HierarchyRepository
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cvj-stages", tags=["cvj-stages"])


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


@router.get("", response_model=None)
def list_stages(
    include_inactive: bool = Query(default=False),
    include_hierarchy: bool = Query(
        default=False,
        description="Nest sub-categories and their KPIs under each stage.",
    ),
    db: Session = Depends(get_db),
) -> list[CVJStageResponse] | list[CVJStageTreeResponse]:
    """
    List stages in display order.

    With ``include_hierarchy`` each stage carries its sub-categories and
    their KPIs.
    """
    repo = HierarchyRepository(db)
    if include_hierarchy:
        stages = repo.list_stages_with_hierarchy(include_inactive=include_inactive)
        return [CVJStageTreeResponse.model_validate(s) for s in stages]
    stages = repo.list_stages(include_inactive=include_inactive)
    return [CVJStageResponse.model_validate(s) for s in stages]


@router.get("/{stage_id}", response_model=CVJStageResponse)
def get_stage(stage_id: uuid.UUID, db: Session = Depends(get_db)) -> CVJStageResponse:
    try:
        stage = HierarchyRepository(db).require_stage(stage_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return CVJStageResponse.model_validate(stage)


@router.post("", response_model=CVJStageResponse, status_code=status.HTTP_201_CREATED)
def create_stage(
    body: CVJStageCreateRequest,
    db: Session = Depends(get_db),
) -> CVJStageResponse:
    """
    Create a stage.

    Raises HTTP 409 if a stage with the same name already exists.
    """
    try:
        stage = HierarchyRepository(db).create_stage(**body.model_dump())
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    logger.info("CVJ stage created id=%s name=%r", stage.id, stage.name)
    return CVJStageResponse.model_validate(stage)


@router.put("/{stage_id}", response_model=CVJStageResponse)
def update_stage(
    stage_id: uuid.UUID,
    body: CVJStageUpdateRequest,
    db: Session = Depends(get_db),
) -> CVJStageResponse:
    repo = HierarchyRepository(db)
    try:
        stage = repo.update_stage(repo.require_stage(stage_id), body.model_dump(exclude_none=True))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return CVJStageResponse.model_validate(stage)


@router.delete("/{stage_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stage(stage_id: uuid.UUID, db: Session = Depends(get_db)) -> Response:
    """
    Delete a stage together with its sub-categories, KPIs and their data.
    """
    repo = HierarchyRepository(db)
    try:
        repo.delete_stage(repo.require_stage(stage_id))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    logger.info("CVJ stage deleted id=%s", stage_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Sub-categories of a stage
# ---------------------------------------------------------------------------


@router.get("/{stage_id}/subcategories", response_model=list[SubCategoryResponse])
def list_stage_sub_categories(
    stage_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> list[SubCategoryResponse]:
    repo = HierarchyRepository(db)
    try:
        repo.require_stage(stage_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return [SubCategoryResponse.model_validate(s) for s in repo.list_sub_categories(stage_id=stage_id)]


@router.post(
    "/{stage_id}/subcategories",
    response_model=SubCategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_sub_category(
    stage_id: uuid.UUID,
    body: SubCategoryCreateRequest,
    db: Session = Depends(get_db),
) -> SubCategoryResponse:
    repo = HierarchyRepository(db)
    try:
        repo.require_stage(stage_id)
        sub_category = repo.create_sub_category(cvj_stage_id=stage_id, **body.model_dump())
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return SubCategoryResponse.model_validate(sub_category)


@router.put("/subcategories/{sub_category_id}", response_model=SubCategoryResponse)
def update_sub_category(
    sub_category_id: uuid.UUID,
    body: SubCategoryUpdateRequest,
    db: Session = Depends(get_db),
) -> SubCategoryResponse:
    repo = HierarchyRepository(db)
    changes = body.model_dump(exclude_none=True)
    try:
        sub_category = repo.require_sub_category(sub_category_id)
        if changes.get("cvj_stage_id") is not None:
            repo.require_stage(changes["cvj_stage_id"])
        sub_category = repo.update_sub_category(sub_category, changes)
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return SubCategoryResponse.model_validate(sub_category)


@router.delete("/subcategories/{sub_category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sub_category(sub_category_id: uuid.UUID, db: Session = Depends(get_db)) -> Response:
    repo = HierarchyRepository(db)
    try:
        repo.delete_sub_category(repo.require_sub_category(sub_category_id))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
