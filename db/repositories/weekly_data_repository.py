"""
db/repositories/weekly_data_repository.py

Persistence layer for WeeklyDataEntry records.

All methods are transaction-safe. The caller controls commit/rollback;
this repository never commits on its own.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models.week import Week
from db.models.weekly_data_entry import WeeklyDataEntry
from db.repositories.errors import (
    BulkUpsertError,
    DuplicateEntityError,
    EntityNotFoundError,
)
from db.repositories.types import WeeklyEntryUpsert
from scorecard.periods import parse_month_id

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("actual_value", "notes")


class WeeklyDataRepository:
    """
    Repository for one-value-per-KPI-per-week entries.

    Upsert semantics: writing a ``(week_id, kpi_id)`` pair that already
    exists replaces ``actual_value`` in place; ``notes`` are replaced only
    when the incoming row carries them.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_entries(
        self,
        *,
        week_id: str | None = None,
        kpi_id: uuid.UUID | None = None,
        month_id: str | None = None,
    ) -> list[WeeklyDataEntry]:
        """
        Entries filtered by week, KPI and/or month.

        ``month_id`` matches the week's stored ``(year, month)``.  Results are
        ordered by week start date.
        """
        stmt = select(WeeklyDataEntry).join(WeeklyDataEntry.week).order_by(Week.start_date)
        if week_id is not None:
            stmt = stmt.where(WeeklyDataEntry.week_id == week_id)
        if kpi_id is not None:
            stmt = stmt.where(WeeklyDataEntry.kpi_id == kpi_id)
        if month_id is not None:
            year, month = parse_month_id(month_id)
            stmt = stmt.where(Week.year == year, Week.month == month)
        return list(self._session.scalars(stmt).all())

    def list_for_weeks(self, week_ids: Iterable[str]) -> list[WeeklyDataEntry]:
        wanted = list(dict.fromkeys(week_ids))
        if not wanted:
            return []
        stmt = select(WeeklyDataEntry).where(WeeklyDataEntry.week_id.in_(wanted))
        return list(self._session.scalars(stmt).all())

    def list_between(
        self,
        date_from: date,
        date_to: date,
        *,
        kpi_ids: Iterable[uuid.UUID] | None = None,
    ) -> list[tuple[WeeklyDataEntry, Week]]:
        """Entries whose week starts inside ``date_from``..``date_to`` (inclusive)."""
        stmt = (
            select(WeeklyDataEntry, Week)
            .join(WeeklyDataEntry.week)
            .where(Week.start_date >= date_from, Week.start_date <= date_to)
            .order_by(Week.start_date)
        )
        if kpi_ids is not None:
            stmt = stmt.where(WeeklyDataEntry.kpi_id.in_(list(kpi_ids)))
        return [(entry, week) for entry, week in self._session.execute(stmt).all()]

    def get_entry(self, entry_id: uuid.UUID) -> WeeklyDataEntry | None:
        return self._session.get(WeeklyDataEntry, entry_id)

    def require_entry(self, entry_id: uuid.UUID) -> WeeklyDataEntry:
        entry = self.get_entry(entry_id)
        if entry is None:
            raise EntityNotFoundError("Weekly data entry", [entry_id])
        return entry

    def find_entry(self, week_id: str, kpi_id: uuid.UUID) -> WeeklyDataEntry | None:
        stmt = select(WeeklyDataEntry).where(
            WeeklyDataEntry.week_id == week_id,
            WeeklyDataEntry.kpi_id == kpi_id,
        )
        return self._session.scalars(stmt).one_or_none()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_entry(
        self,
        *,
        week_id: str,
        kpi_id: uuid.UUID,
        actual_value: float | None = None,
        notes: str | None = None,
    ) -> WeeklyDataEntry:
        if self.find_entry(week_id, kpi_id) is not None:
            raise DuplicateEntityError(
                f"Weekly data for KPI {kpi_id} in week {week_id!r} already exists."
            )
        entry = WeeklyDataEntry(
            week_id=week_id,
            kpi_id=kpi_id,
            actual_value=actual_value,
            notes=notes,
        )
        self._session.add(entry)
        self._session.flush()
        return entry

    def update_entry(self, entry: WeeklyDataEntry, changes: Mapping[str, Any]) -> WeeklyDataEntry:
        """Apply value changes; an entry's (week, KPI) key never changes."""
        for key in _UPDATABLE_FIELDS:
            if key in changes:
                setattr(entry, key, changes[key])
        self._session.flush()
        return entry

    def delete_entry(self, entry: WeeklyDataEntry) -> None:
        self._session.delete(entry)
        self._session.flush()

    def bulk_upsert(self, rows: Sequence[WeeklyEntryUpsert]) -> list[WeeklyDataEntry]:
        """
        Create or overwrite many entries as one unit.

        Rows with the same ``(week_id, kpi_id)`` within the call are
        deduplicated first; the last occurrence wins.  Wraps the writes in a
        savepoint when already inside a transaction so that a failure leaves
        none of the batch behind.

        Referenced weeks and KPIs must exist; callers check that beforehand.

        Raises
        ------
        BulkUpsertError
            When the database rejects any row.  Nothing from the batch is kept.
        """
        if not rows:
            return []

        deduped = _deduplicate(rows)
        try:
            with self._transaction_context():
                existing = self._load_existing([(r.week_id, r.kpi_id) for r in deduped])
                results: list[WeeklyDataEntry] = []
                for row in deduped:
                    entry = existing.get((row.week_id, row.kpi_id))
                    if entry is None:
                        entry = WeeklyDataEntry(
                            week_id=row.week_id,
                            kpi_id=row.kpi_id,
                            actual_value=row.actual_value,
                            notes=row.notes,
                        )
                        self._session.add(entry)
                    else:
                        entry.actual_value = row.actual_value
                        if row.notes is not None:
                            entry.notes = row.notes
                    results.append(entry)
                self._session.flush()
        except SQLAlchemyError as exc:
            logger.warning("Weekly data bulk upsert of %d rows rolled back: %s", len(deduped), exc)
            raise BulkUpsertError(f"Failed to save {len(deduped)} weekly data rows.") from exc

        logger.info(
            "Weekly data bulk upsert rows=%d inserted=%d updated=%d",
            len(results), len(deduped) - len(existing), len(existing),
        )
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_existing(
        self,
        keys: Sequence[tuple[str, uuid.UUID]],
    ) -> dict[tuple[str, uuid.UUID], WeeklyDataEntry]:
        wanted = set(keys)
        stmt = select(WeeklyDataEntry).where(
            WeeklyDataEntry.week_id.in_(sorted({week_id for week_id, _ in wanted}, key=str)),
            WeeklyDataEntry.kpi_id.in_(sorted({kpi_id for _, kpi_id in wanted}, key=str)),
        )
        return {
            (e.week_id, e.kpi_id): e
            for e in self._session.scalars(stmt).all()
            if (e.week_id, e.kpi_id) in wanted
        }

    def _transaction_context(self) -> Any:
        if self._session.in_transaction():
            return self._session.begin_nested()
        return self._session.begin()


# ---------------------------------------------------------------------------
# Module-level helpers (no business logic)
# ---------------------------------------------------------------------------


def _deduplicate(rows: Sequence[WeeklyEntryUpsert]) -> list[WeeklyEntryUpsert]:
    """Last-write-wins deduplication keyed on (week_id, kpi_id)."""
    seen: dict[tuple[str, uuid.UUID], WeeklyEntryUpsert] = {}
    for row in rows:
        seen[(row.week_id, row.kpi_id)] = row
    return list(seen.values())
