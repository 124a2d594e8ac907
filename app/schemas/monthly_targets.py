"""
app/schemas/monthly_targets.py

Request and response schemas for monthly KPI target overrides.
"""

from __future__ import annotations

import uuid

from pydantic import Field

from app.schemas.base import MONTH_ID_PATTERN, CamelModel


class MonthlyTargetCreateRequest(CamelModel):
    kpi_id: uuid.UUID
    month_id: str = Field(..., pattern=MONTH_ID_PATTERN)
    target_value: float = Field(..., gt=0)


class MonthlyTargetUpdateRequest(CamelModel):
    target_value: float = Field(..., gt=0)


class MonthlyTargetBulkRequest(CamelModel):
    targets: list[MonthlyTargetCreateRequest] = Field(..., min_length=1)


class MonthlyTargetResponse(CamelModel):
    id: uuid.UUID
    kpi_id: uuid.UUID
    month_id: str
    target_value: float
