"""
app/api/routers/sub_category_router.py

Read-only sub-category endpoints across all stages.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.dependencies import raise_for_repository_error
from app.schemas.hierarchy import SubCategoryResponse
from db.repositories.errors import ScorecardRepositoryError
from db.repositories.hierarchy_repository import HierarchyRepository
from db.session import get_db

router = APIRouter(prefix="/api/subcategories", tags=["subcategories"])


@router.get("", response_model=list[SubCategoryResponse])
def list_sub_categories(
    stage_id: uuid.UUID | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[SubCategoryResponse]:
    sub_categories = HierarchyRepository(db).list_sub_categories(stage_id=stage_id)
    return [SubCategoryResponse.model_validate(s) for s in sub_categories]


@router.get("/{sub_category_id}", response_model=SubCategoryResponse)
def get_sub_category(
    sub_category_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> SubCategoryResponse:
    try:
        sub_category = HierarchyRepository(db).require_sub_category(sub_category_id)
    except ScorecardRepositoryError as exc:
        raise_for_repository_error(exc)
    return SubCategoryResponse.model_validate(sub_category)
