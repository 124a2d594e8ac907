"""
db/models/cvj_stage.py

Customer Value Journey stage, the top level of the KPI hierarchy.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.sub_category import SubCategory


class CVJStage(Base, TimestampMixin):
    """
    One of the eight journey stages (Aware, Engage, Subscribe, Convert,
    Excite, Ascend, Advocate, Promote).

    A stage owns its sub-categories; deleting a stage deletes them and,
    transitively, their KPIs, weekly entries and targets.
    """

    __tablename__ = "cvj_stages"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    display_order: Mapped[int] = mapped_column(Integer, nullable=False)

    color_code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Display colour token for the stage",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    sub_categories: Mapped[list["SubCategory"]] = relationship(
        "SubCategory",
        back_populates="cvj_stage",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SubCategory.display_order",
    )

    __table_args__ = (
        Index("ix_cvj_stages_display_order", "display_order"),
    )

    def __repr__(self) -> str:
        return f"<CVJStage id={self.id} name={self.name!r}>"
