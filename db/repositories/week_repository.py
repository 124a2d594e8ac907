"""
db/repositories/week_repository.py

Persistence layer for reporting weeks.

Weeks are keyed by their caller-supplied label.  The caller controls
commit/rollback; this repository never commits on its own.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from db.models.week import Week
from db.repositories.errors import DuplicateEntityError, EntityNotFoundError
from scorecard.periods import parse_month_id


class WeekRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_weeks(self) -> list[Week]:
        stmt = select(Week).order_by(Week.start_date)
        return list(self._session.scalars(stmt).all())

    def get_week(self, week_id: str) -> Week | None:
        return self._session.get(Week, week_id)

    def require_week(self, week_id: str) -> Week:
        week = self.get_week(week_id)
        if week is None:
            raise EntityNotFoundError("Week", [week_id])
        return week

    def require_weeks(self, week_ids: Iterable[str]) -> dict[str, Week]:
        """Load every id in one query; raise naming all ids that do not exist."""
        wanted = list(dict.fromkeys(week_ids))
        if not wanted:
            return {}
        found = {
            week.id: week
            for week in self._session.scalars(select(Week).where(Week.id.in_(wanted))).all()
        }
        missing = [week_id for week_id in wanted if week_id not in found]
        if missing:
            raise EntityNotFoundError("Week", missing)
        return found

    def list_for_months(self, month_ids: Iterable[str]) -> list[Week]:
        """
        Weeks assigned to any of ``month_ids``.

        Assignment follows the stored ``(year, month)``, not the date range.
        """
        pairs = {parse_month_id(month_id) for month_id in month_ids}
        if not pairs:
            return []
        clauses = [and_(Week.year == year, Week.month == month) for year, month in pairs]
        stmt = select(Week).where(or_(*clauses)).order_by(Week.start_date)
        return list(self._session.scalars(stmt).all())

    def list_overlapping(self, start: date, end: date) -> list[Week]:
        """Weeks whose date range shares at least one day with ``start``..``end``."""
        stmt = (
            select(Week)
            .where(Week.start_date <= end, Week.end_date >= start)
            .order_by(Week.start_date)
        )
        return list(self._session.scalars(stmt).all())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_week(self, **fields: Any) -> Week:
        if self.get_week(fields["id"]) is not None:
            raise DuplicateEntityError(f"Week {fields['id']!r} already exists.")
        self._ensure_range_free(fields["start_date"], fields["end_date"])
        self._ensure_number_free(fields["year"], fields["week_number"])

        week = Week(**fields)
        self._session.add(week)
        self._session.flush()
        return week

    def update_week(self, week: Week, changes: Mapping[str, Any]) -> Week:
        start = changes.get("start_date", week.start_date)
        end = changes.get("end_date", week.end_date)
        if (start, end) != (week.start_date, week.end_date):
            self._ensure_range_free(start, end, exclude_id=week.id)

        year = changes.get("year", week.year)
        number = changes.get("week_number", week.week_number)
        if (year, number) != (week.year, week.week_number):
            self._ensure_number_free(year, number, exclude_id=week.id)

        for key, value in changes.items():
            setattr(week, key, value)
        self._session.flush()
        return week

    def delete_week(self, week: Week) -> None:
        self._session.delete(week)
        self._session.flush()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_range_free(self, start: date, end: date, exclude_id: str | None = None) -> None:
        stmt = select(Week.id).where(Week.start_date == start, Week.end_date == end)
        if exclude_id is not None:
            stmt = stmt.where(Week.id != exclude_id)
        existing = self._session.scalar(stmt)
        if existing is not None:
            raise DuplicateEntityError(
                f"Week {existing!r} already covers {start.isoformat()}..{end.isoformat()}."
            )

    def _ensure_number_free(
        self,
        year: int,
        week_number: int,
        exclude_id: str | None = None,
    ) -> None:
        stmt = select(Week.id).where(Week.year == year, Week.week_number == week_number)
        if exclude_id is not None:
            stmt = stmt.where(Week.id != exclude_id)
        existing = self._session.scalar(stmt)
        if existing is not None:
            raise DuplicateEntityError(
                f"Week {existing!r} already uses week number {week_number} of {year}."
            )
