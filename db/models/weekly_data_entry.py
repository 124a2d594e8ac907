"""
db/models/weekly_data_entry.py

One recorded actual value per KPI per week.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.kpi import KPI
    from db.models.week import Week

UNIQUE_WEEK_KPI = "uq_weekly_data_entries_week_kpi"


class WeeklyDataEntry(Base, TimestampMixin):
    __tablename__ = "weekly_data_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    week_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("weeks.id", ondelete="CASCADE"),
        nullable=False,
    )
    kpi_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("kpis.id", ondelete="CASCADE"),
        nullable=False,
    )
    actual_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    week: Mapped["Week"] = relationship("Week", back_populates="weekly_data_entries")
    kpi: Mapped["KPI"] = relationship("KPI", back_populates="weekly_data_entries")

    __table_args__ = (
        UniqueConstraint("week_id", "kpi_id", name=UNIQUE_WEEK_KPI),
        Index("ix_weekly_data_entries_kpi_id", "kpi_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<WeeklyDataEntry week_id={self.week_id!r} kpi_id={self.kpi_id} "
            f"actual_value={self.actual_value}>"
        )
