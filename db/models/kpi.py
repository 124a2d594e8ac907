"""
db/models/kpi.py

KPI definition owned by a sub-category.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, Float, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin
from scorecard.types import UnitType

if TYPE_CHECKING:
    from db.models.cvj_stage import CVJStage
    from db.models.monthly_kpi_target import MonthlyKpiTarget
    from db.models.sub_category import SubCategory
    from db.models.weekly_data_entry import WeeklyDataEntry


class KPI(Base, TimestampMixin):
    """
    A tracked marketing metric.

    ``default_monthly_target_value`` applies to every month that has no
    :class:`MonthlyKpiTarget` override.  Inactive KPIs are kept for history
    but left out of monthly scorecards.
    """

    __tablename__ = "kpis"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    unit_type: Mapped[UnitType] = mapped_column(
        Enum(UnitType, name="unit_type"),
        nullable=False,
    )
    default_monthly_target_value: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
        comment="Fallback target when no monthly override exists",
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sub_category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("sub_categories.id", ondelete="CASCADE"),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    sub_category: Mapped["SubCategory"] = relationship("SubCategory", back_populates="kpis")
    weekly_data_entries: Mapped[list["WeeklyDataEntry"]] = relationship(
        "WeeklyDataEntry",
        back_populates="kpi",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    monthly_targets: Mapped[list["MonthlyKpiTarget"]] = relationship(
        "MonthlyKpiTarget",
        back_populates="kpi",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_kpis_sub_category_id", "sub_category_id"),
        Index("ix_kpis_is_active", "is_active"),
    )

    @property
    def cvj_stage(self) -> "CVJStage":
        return self.sub_category.cvj_stage

    def __repr__(self) -> str:
        return f"<KPI id={self.id} name={self.name!r} unit={self.unit_type}>"
