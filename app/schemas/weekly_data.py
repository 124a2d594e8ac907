"""
app/schemas/weekly_data.py

Request and response schemas for weekly data entries.
"""

from __future__ import annotations

import uuid

from pydantic import Field

from app.schemas.base import CamelModel


class WeeklyDataCreateRequest(CamelModel):
    week_id: str = Field(..., min_length=1, max_length=64)
    kpi_id: uuid.UUID
    actual_value: float | None = None
    notes: str | None = None


class WeeklyDataUpdateRequest(CamelModel):
    actual_value: float | None = None
    notes: str | None = None


class WeeklyDataBulkItem(CamelModel):
    week_id: str = Field(..., min_length=1, max_length=64)
    kpi_id: uuid.UUID
    actual_value: float | None = None
    notes: str | None = None


class WeeklyDataBulkRequest(CamelModel):
    entries: list[WeeklyDataBulkItem] = Field(..., min_length=1)


class WeeklyDataResponse(CamelModel):
    id: uuid.UUID
    week_id: str
    kpi_id: uuid.UUID
    actual_value: float | None
    notes: str | None


class BulkWriteResponse(CamelModel):
    """
    Summary returned by the bulk upsert endpoints.
    """

    saved: int = Field(..., ge=0)
