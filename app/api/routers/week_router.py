"""
app/api/routers/week_router.py

Reporting week endpoints.

Week ids are labels such as ``"Week 20 [05/12-05/18]"`` and contain
slashes, so the id path parameters use the ``path`` converter.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.dependencies import raise_for_repository_error
from app.schemas.weeks import WeekCreateRequest, WeekResponse, WeekUpdateRequest
from db.repositories.errors import ScorecardRepositoryError
from db.repositories.week_repository import WeekRepository
from db.session import get_db
from scorecard.periods import week_from_dates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics/weeks", tags=["weeks"])


@router.get("", response_model=list[WeekResponse])
def list_weeks(db: Session = Depends(get_db)) -> list[WeekResponse]:
    return [WeekResponse.model_validate(w) for w in WeekRepository(db).list_weeks()]


@router.post("", response_model=WeekResponse, status_code=status.HTTP_201_CREATED)
def create_week(body: WeekCreateRequest, db: Session = Depends(get_db)) -> WeekResponse:
    """
    Create a reporting week.

    Omitted identifying fields are derived from ``startDate``.  Raises HTTP
    409 when the id, the date range or the (year, week number) pair is
    already taken.
    """
    derived = week_from_dates(body.start_date, body.end_date)
    fields = {
        "id": body.id or derived.id,
        "year": body.year if body.year is not None else derived.year,
        "week_number": body.week_number if body.week_number is not None else derived.week_number,
        "month": body.month if body.month is not None else derived.month,
        "start_date": body.start_date,
        "end_date": body.end_date,
    }
    try:
        week = WeekRepository(db).create_week(**fields)
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    logger.info("Week created id=%r month=%s", week.id, week.month_id)
    return WeekResponse.model_validate(week)


@router.put("/{week_id:path}", response_model=WeekResponse)
def update_week(
    week_id: str,
    body: WeekUpdateRequest,
    db: Session = Depends(get_db),
) -> WeekResponse:
    repo = WeekRepository(db)
    changes = body.model_dump(exclude_none=True)
    try:
        week = repo.require_week(week_id)
        start = changes.get("start_date", week.start_date)
        end = changes.get("end_date", week.end_date)
        if end < start:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="endDate must not be before startDate.",
            )
        week = repo.update_week(week, changes)
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    return WeekResponse.model_validate(week)


@router.delete("/{week_id:path}", status_code=status.HTTP_204_NO_CONTENT)
def delete_week(week_id: str, db: Session = Depends(get_db)) -> Response:
    """
    Delete a week and every weekly data entry recorded for it.
    """
    repo = WeekRepository(db)
    try:
        repo.delete_week(repo.require_week(week_id))
        db.commit()
    except ScorecardRepositoryError as exc:
        db.rollback()
        raise_for_repository_error(exc)
    logger.info("Week deleted id=%r", week_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
