"""
db/repositories/monthly_target_repository.py

Persistence layer for MonthlyKpiTarget overrides.

The caller controls commit/rollback; this repository never commits on its own.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.models.monthly_kpi_target import MonthlyKpiTarget
from db.repositories.errors import (
    BulkUpsertError,
    DuplicateEntityError,
    EntityNotFoundError,
)
from db.repositories.types import MonthlyTargetUpsert

logger = logging.getLogger(__name__)


class MonthlyTargetRepository:
    """
    Repository for per-month KPI target overrides.

    At most one target exists per ``(kpi_id, month_id)``; upserting an
    existing pair overwrites ``target_value``.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_targets(
        self,
        *,
        kpi_id: uuid.UUID | None = None,
        month_id: str | None = None,
    ) -> list[MonthlyKpiTarget]:
        stmt = select(MonthlyKpiTarget).order_by(
            MonthlyKpiTarget.month_id.desc(),
            MonthlyKpiTarget.kpi_id,
        )
        if kpi_id is not None:
            stmt = stmt.where(MonthlyKpiTarget.kpi_id == kpi_id)
        if month_id is not None:
            stmt = stmt.where(MonthlyKpiTarget.month_id == month_id)
        return list(self._session.scalars(stmt).all())

    def list_for_months(self, month_ids: Iterable[str]) -> list[MonthlyKpiTarget]:
        wanted = list(dict.fromkeys(month_ids))
        if not wanted:
            return []
        stmt = select(MonthlyKpiTarget).where(MonthlyKpiTarget.month_id.in_(wanted))
        return list(self._session.scalars(stmt).all())

    def get_target(self, target_id: uuid.UUID) -> MonthlyKpiTarget | None:
        return self._session.get(MonthlyKpiTarget, target_id)

    def require_target(self, target_id: uuid.UUID) -> MonthlyKpiTarget:
        target = self.get_target(target_id)
        if target is None:
            raise EntityNotFoundError("Monthly target", [target_id])
        return target

    def find_target(self, kpi_id: uuid.UUID, month_id: str) -> MonthlyKpiTarget | None:
        stmt = select(MonthlyKpiTarget).where(
            MonthlyKpiTarget.kpi_id == kpi_id,
            MonthlyKpiTarget.month_id == month_id,
        )
        return self._session.scalars(stmt).one_or_none()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_target(
        self,
        *,
        kpi_id: uuid.UUID,
        month_id: str,
        target_value: float,
    ) -> MonthlyKpiTarget:
        if self.find_target(kpi_id, month_id) is not None:
            raise DuplicateEntityError(
                f"A target for KPI {kpi_id} in {month_id} already exists."
            )
        target = MonthlyKpiTarget(kpi_id=kpi_id, month_id=month_id, target_value=target_value)
        self._session.add(target)
        self._session.flush()
        return target

    def update_target(
        self,
        target: MonthlyKpiTarget,
        changes: Mapping[str, Any],
    ) -> MonthlyKpiTarget:
        """Apply value changes; a target's (KPI, month) key never changes."""
        if "target_value" in changes:
            target.target_value = changes["target_value"]
        self._session.flush()
        return target

    def delete_target(self, target: MonthlyKpiTarget) -> None:
        self._session.delete(target)
        self._session.flush()

    def bulk_upsert(self, rows: Sequence[MonthlyTargetUpsert]) -> list[MonthlyKpiTarget]:
        """
        Create or overwrite many targets in one transaction.

        Duplicate ``(kpi_id, month_id)`` pairs within the call collapse to the
        last occurrence.  Any database failure rolls back the whole batch and
        surfaces as :class:`BulkUpsertError`.
        """
        if not rows:
            return []

        deduped = _deduplicate(rows)
        try:
            with self._transaction_context():
                existing = self._load_existing([(r.kpi_id, r.month_id) for r in deduped])
                results: list[MonthlyKpiTarget] = []
                for row in deduped:
                    target = existing.get((row.kpi_id, row.month_id))
                    if target is None:
                        target = MonthlyKpiTarget(
                            kpi_id=row.kpi_id,
                            month_id=row.month_id,
                            target_value=row.target_value,
                        )
                        self._session.add(target)
                    else:
                        target.target_value = row.target_value
                    results.append(target)
                self._session.flush()
        except SQLAlchemyError as exc:
            logger.warning("Monthly target bulk upsert of %d rows rolled back: %s", len(deduped), exc)
            raise BulkUpsertError(f"Failed to save {len(deduped)} monthly targets.") from exc

        logger.info(
            "Monthly target bulk upsert rows=%d inserted=%d updated=%d",
            len(results), len(deduped) - len(existing), len(existing),
        )
        return results

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _load_existing(
        self,
        keys: Sequence[tuple[uuid.UUID, str]],
    ) -> dict[tuple[uuid.UUID, str], MonthlyKpiTarget]:
        wanted = set(keys)
        stmt = select(MonthlyKpiTarget).where(
            MonthlyKpiTarget.kpi_id.in_(sorted({kpi_id for kpi_id, _ in wanted}, key=str)),
            MonthlyKpiTarget.month_id.in_(sorted({month_id for _, month_id in wanted}, key=str)),
        )
        return {
            (t.kpi_id, t.month_id): t
            for t in self._session.scalars(stmt).all()
            if (t.kpi_id, t.month_id) in wanted
        }

    def _transaction_context(self) -> Any:
        if self._session.in_transaction():
            return self._session.begin_nested()
        return self._session.begin()


def _deduplicate(rows: Sequence[MonthlyTargetUpsert]) -> list[MonthlyTargetUpsert]:
    """Last-write-wins deduplication keyed on (kpi_id, month_id)."""
    seen: dict[tuple[uuid.UUID, str], MonthlyTargetUpsert] = {}
    for row in rows:
        seen[(row.kpi_id, row.month_id)] = row
    return list(seen.values())
