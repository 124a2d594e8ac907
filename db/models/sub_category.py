"""
db/models/sub_category.py

Sub-category grouping KPIs inside a journey stage.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.cvj_stage import CVJStage
    from db.models.kpi import KPI


class SubCategory(Base, TimestampMixin):
    __tablename__ = "sub_categories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False)
    cvj_stage_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("cvj_stages.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    cvj_stage: Mapped["CVJStage"] = relationship("CVJStage", back_populates="sub_categories")
    kpis: Mapped[list["KPI"]] = relationship(
        "KPI",
        back_populates="sub_category",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("name", "cvj_stage_id", name="uq_sub_categories_name_stage"),
    )

    def __repr__(self) -> str:
        return f"<SubCategory id={self.id} name={self.name!r}>"
