"""
db/repositories/hierarchy_repository.py

Persistence for the journey hierarchy: CVJ stages, sub-categories and KPIs.

The caller controls commit/rollback; this repository only flushes so that
generated ids are available immediately.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from db.models.cvj_stage import CVJStage
from db.models.kpi import KPI
from db.models.sub_category import SubCategory
from db.repositories.errors import DuplicateEntityError, EntityNotFoundError


class HierarchyRepository:
    """
    Read/write access to stages, sub-categories and KPIs.

    Lookups by id return ``None`` when missing; the ``require_*`` variants
    raise :class:`EntityNotFoundError` naming every missing id.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # CVJ stages
    # ------------------------------------------------------------------

    def list_stages(self, *, include_inactive: bool = False) -> list[CVJStage]:
        stmt = select(CVJStage).order_by(CVJStage.display_order)
        if not include_inactive:
            stmt = stmt.where(CVJStage.is_active.is_(True))
        return list(self._session.scalars(stmt).all())

    def list_stages_with_hierarchy(self, *, include_inactive: bool = False) -> list[CVJStage]:
        """Stages with sub-categories and KPIs eagerly loaded, ordered by display order."""
        stmt = (
            select(CVJStage)
            .options(selectinload(CVJStage.sub_categories).selectinload(SubCategory.kpis))
            .order_by(CVJStage.display_order)
        )
        if not include_inactive:
            stmt = stmt.where(CVJStage.is_active.is_(True))
        return list(self._session.scalars(stmt).all())

    def get_stage(self, stage_id: uuid.UUID) -> CVJStage | None:
        return self._session.get(CVJStage, stage_id)

    def require_stage(self, stage_id: uuid.UUID) -> CVJStage:
        stage = self.get_stage(stage_id)
        if stage is None:
            raise EntityNotFoundError("CVJ stage", [stage_id])
        return stage

    def create_stage(self, **fields: Any) -> CVJStage:
        self._ensure_stage_name_free(fields["name"])
        stage = CVJStage(**fields)
        self._session.add(stage)
        self._session.flush()
        return stage

    def update_stage(self, stage: CVJStage, changes: Mapping[str, Any]) -> CVJStage:
        new_name = changes.get("name")
        if new_name is not None and new_name != stage.name:
            self._ensure_stage_name_free(new_name)
        return self._apply(stage, changes)

    def delete_stage(self, stage: CVJStage) -> None:
        self._session.delete(stage)
        self._session.flush()

    def _ensure_stage_name_free(self, name: str) -> None:
        existing = self._session.scalar(select(CVJStage.id).where(CVJStage.name == name))
        if existing is not None:
            raise DuplicateEntityError(f"A CVJ stage named {name!r} already exists.")

    # ------------------------------------------------------------------
    # Sub-categories
    # ------------------------------------------------------------------

    def list_sub_categories(self, *, stage_id: uuid.UUID | None = None) -> list[SubCategory]:
        stmt = select(SubCategory).order_by(SubCategory.display_order)
        if stage_id is not None:
            stmt = stmt.where(SubCategory.cvj_stage_id == stage_id)
        return list(self._session.scalars(stmt).all())

    def get_sub_category(self, sub_category_id: uuid.UUID) -> SubCategory | None:
        return self._session.get(SubCategory, sub_category_id)

    def require_sub_category(self, sub_category_id: uuid.UUID) -> SubCategory:
        sub_category = self.get_sub_category(sub_category_id)
        if sub_category is None:
            raise EntityNotFoundError("Subcategory", [sub_category_id])
        return sub_category

    def create_sub_category(self, **fields: Any) -> SubCategory:
        self._ensure_sub_category_name_free(fields["name"], fields["cvj_stage_id"])
        sub_category = SubCategory(**fields)
        self._session.add(sub_category)
        self._session.flush()
        return sub_category

    def update_sub_category(
        self,
        sub_category: SubCategory,
        changes: Mapping[str, Any],
    ) -> SubCategory:
        name = changes.get("name", sub_category.name)
        stage_id = changes.get("cvj_stage_id", sub_category.cvj_stage_id)
        if (name, stage_id) != (sub_category.name, sub_category.cvj_stage_id):
            self._ensure_sub_category_name_free(name, stage_id)
        return self._apply(sub_category, changes)

    def delete_sub_category(self, sub_category: SubCategory) -> None:
        self._session.delete(sub_category)
        self._session.flush()

    def _ensure_sub_category_name_free(self, name: str, stage_id: uuid.UUID) -> None:
        existing = self._session.scalar(
            select(SubCategory.id).where(
                SubCategory.name == name,
                SubCategory.cvj_stage_id == stage_id,
            )
        )
        if existing is not None:
            raise DuplicateEntityError(
                f"A subcategory named {name!r} already exists in this stage."
            )

    # ------------------------------------------------------------------
    # KPIs
    # ------------------------------------------------------------------

    def list_kpis(
        self,
        *,
        stage_id: uuid.UUID | None = None,
        sub_category_id: uuid.UUID | None = None,
        active: bool | None = None,
    ) -> list[KPI]:
        """
        KPIs with their sub-category and stage loaded.

        Ordered by stage, then sub-category, then KPI name so scorecards list
        KPIs in journey order.
        """
        stmt = (
            select(KPI)
            .join(KPI.sub_category)
            .join(SubCategory.cvj_stage)
            .options(selectinload(KPI.sub_category).selectinload(SubCategory.cvj_stage))
            .order_by(CVJStage.display_order, SubCategory.display_order, KPI.name)
        )
        if stage_id is not None:
            stmt = stmt.where(SubCategory.cvj_stage_id == stage_id)
        if sub_category_id is not None:
            stmt = stmt.where(KPI.sub_category_id == sub_category_id)
        if active is not None:
            stmt = stmt.where(KPI.is_active.is_(active))
        return list(self._session.scalars(stmt).all())

    def get_kpi(self, kpi_id: uuid.UUID) -> KPI | None:
        return self._session.get(KPI, kpi_id)

    def require_kpi(self, kpi_id: uuid.UUID) -> KPI:
        kpi = self.get_kpi(kpi_id)
        if kpi is None:
            raise EntityNotFoundError("KPI", [kpi_id])
        return kpi

    def require_kpis(self, kpi_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, KPI]:
        """Load every id in one query; raise naming all ids that do not exist."""
        wanted = list(dict.fromkeys(kpi_ids))
        if not wanted:
            return {}
        found = {
            kpi.id: kpi
            for kpi in self._session.scalars(select(KPI).where(KPI.id.in_(wanted))).all()
        }
        missing = [kpi_id for kpi_id in wanted if kpi_id not in found]
        if missing:
            raise EntityNotFoundError("KPI", missing)
        return found

    def create_kpi(self, **fields: Any) -> KPI:
        kpi = KPI(**fields)
        self._session.add(kpi)
        self._session.flush()
        return kpi

    def update_kpi(self, kpi: KPI, changes: Mapping[str, Any]) -> KPI:
        return self._apply(kpi, changes)

    def delete_kpi(self, kpi: KPI) -> None:
        self._session.delete(kpi)
        self._session.flush()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _apply(self, row: Any, changes: Mapping[str, Any]) -> Any:
        for key, value in changes.items():
            setattr(row, key, value)
        self._session.flush()
        return row
