"""
app/schemas/hierarchy.py

Request and response schemas for CVJ stages, sub-categories and KPIs.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import Field

from app.schemas.base import CamelModel
from scorecard.types import UnitType


# ---------------------------------------------------------------------------
# CVJ stages
# ---------------------------------------------------------------------------


class CVJStageCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    display_order: int = Field(..., ge=0)
    color_code: str = Field(..., min_length=1, max_length=50)
    is_active: bool = True


class CVJStageUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    display_order: int | None = Field(default=None, ge=0)
    color_code: str | None = Field(default=None, min_length=1, max_length=50)
    is_active: bool | None = None


class CVJStageResponse(CamelModel):
    id: uuid.UUID
    name: str
    display_order: int
    color_code: str
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Sub-categories
# ---------------------------------------------------------------------------


class SubCategoryCreateRequest(CamelModel):
    """
    Body for creating a sub-category under the stage named in the URL.
    """

    name: str = Field(..., min_length=1, max_length=200)
    display_order: int = Field(..., ge=0)


class SubCategoryUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    display_order: int | None = Field(default=None, ge=0)
    cvj_stage_id: uuid.UUID | None = None


class SubCategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    display_order: int
    cvj_stage_id: uuid.UUID


# ---------------------------------------------------------------------------
# KPIs
# ---------------------------------------------------------------------------


class KPICreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    unit_type: UnitType
    default_monthly_target_value: float | None = Field(default=None, ge=0)
    is_active: bool = True
    sub_category_id: uuid.UUID


class KPIUpdateRequest(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    unit_type: UnitType | None = None
    default_monthly_target_value: float | None = Field(default=None, ge=0)
    is_active: bool | None = None
    sub_category_id: uuid.UUID | None = None


class KPIBulkUpdateItem(KPIUpdateRequest):
    id: uuid.UUID


class KPIBulkUpdateRequest(CamelModel):
    updates: list[KPIBulkUpdateItem] = Field(..., min_length=1)


class KPIResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    unit_type: UnitType
    default_monthly_target_value: float | None
    is_active: bool
    sub_category_id: uuid.UUID


class KPIWithRelationsResponse(KPIResponse):
    sub_category: SubCategoryResponse
    cvj_stage: CVJStageResponse


# ---------------------------------------------------------------------------
# Nested hierarchy
# ---------------------------------------------------------------------------


class SubCategoryTreeResponse(SubCategoryResponse):
    kpis: list[KPIResponse] = Field(default_factory=list)


class CVJStageTreeResponse(CVJStageResponse):
    sub_categories: list[SubCategoryTreeResponse] = Field(default_factory=list)
