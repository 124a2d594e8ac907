"""
app/schemas/weeks.py

Request and response schemas for reporting weeks.
"""

from __future__ import annotations

from datetime import date

from pydantic import Field, model_validator

from app.schemas.base import CamelModel


class WeekCreateRequest(CamelModel):
    """
    New reporting week.

    ``id``, ``year``, ``week_number`` and ``month`` default to values derived
    from ``start_date`` when omitted; ``month`` may be set explicitly to
    assign a boundary-crossing week to the later month.
    """

    id: str | None = Field(default=None, min_length=1, max_length=64)
    year: int | None = Field(default=None, ge=1900, le=9999)
    week_number: int | None = Field(default=None, ge=1, le=53)
    month: int | None = Field(default=None, ge=1, le=12)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_range(self) -> "WeekCreateRequest":
        if self.end_date < self.start_date:
            raise ValueError("endDate must not be before startDate.")
        return self


class WeekUpdateRequest(CamelModel):
    year: int | None = Field(default=None, ge=1900, le=9999)
    week_number: int | None = Field(default=None, ge=1, le=53)
    month: int | None = Field(default=None, ge=1, le=12)
    start_date: date | None = None
    end_date: date | None = None


class WeekResponse(CamelModel):
    id: str
    year: int
    week_number: int
    month: int
    month_id: str
    start_date: date
    end_date: date
