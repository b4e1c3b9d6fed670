"""
SaveSlot: the persisted career document.

One row per slot. `document` is the JSON-encoded CareerState; the
`schema_version` column mirrors the version inside the document so a load can
pick the migration chain without parsing first.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from soundempire.db.base import Base


class SaveSlot(Base):
    __tablename__ = "save_slots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    slot: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False)
    document: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
