"""
WeekSnapshot: one row per slot and advanced week.

summary: JSON-encoded list of the week-summary strings.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Integer, String, Text, Numeric, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from soundempire.db.base import Base


class WeekSnapshot(Base):
    __tablename__ = "week_snapshots"
    __table_args__ = (
        UniqueConstraint("slot", "year", "week", name="uq_week_snapshot_slot_year_week"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    slot: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    total_streams: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    units_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    money: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
