"""
db/models/week.py

Reporting week. The primary key is the human-readable week label.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.weekly_data_entry import WeeklyDataEntry


class Week(Base):
    """
    A caller-defined reporting week, e.g. ``"Week 20 [05/12-05/18]"``.

    ``year``/``month`` decide which month the whole week counts toward in
    monthly scorecards, even when ``start_date``..``end_date`` crosses a
    month boundary.
    """

    __tablename__ = "weeks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    weekly_data_entries: Mapped[list["WeeklyDataEntry"]] = relationship(
        "WeeklyDataEntry",
        back_populates="week",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("year", "week_number", name="uq_weeks_year_week_number"),
        Index("ix_weeks_year_month", "year", "month"),
    )

    @property
    def month_id(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def __repr__(self) -> str:
        return f"<Week id={self.id!r} month={self.month_id}>"
