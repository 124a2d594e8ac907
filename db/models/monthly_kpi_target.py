"""
db/models/monthly_kpi_target.py

Per-month target override for a KPI.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.kpi import KPI

UNIQUE_KPI_MONTH = "uq_monthly_kpi_targets_kpi_month"


class MonthlyKpiTarget(Base, TimestampMixin):
    """
    Overrides ``KPI.default_monthly_target_value`` for one ``YYYY-MM`` month.
    """

    __tablename__ = "monthly_kpi_targets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    kpi_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("kpis.id", ondelete="CASCADE"),
        nullable=False,
    )
    month_id: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="YYYY-MM",
    )
    target_value: Mapped[float] = mapped_column(Float, nullable=False)

    kpi: Mapped["KPI"] = relationship("KPI", back_populates="monthly_targets")

    __table_args__ = (
        UniqueConstraint("kpi_id", "month_id", name=UNIQUE_KPI_MONTH),
        Index("ix_monthly_kpi_targets_month_id", "month_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<MonthlyKpiTarget kpi_id={self.kpi_id} month_id={self.month_id!r} "
            f"target_value={self.target_value}>"
        )
