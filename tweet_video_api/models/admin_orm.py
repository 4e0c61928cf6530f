"""
SQLAlchemy ORM models for administrative state: the ban list and the global counters row.
"""

from datetime import datetime

from sqlalchemy import Integer, Text, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base

COUNTERS_ROW_ID = 1


class BanEntryORM(Base):
    __tablename__ = "bans"

    address: Mapped[str] = mapped_column(Text, primary_key=True)
    created_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self) -> str:
        return f"<BanEntryORM(address='{self.address}')>"


class CountersORM(Base):
    """Single-row table (id = 1) holding the global counters."""
    __tablename__ = "stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    total_requests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_videos: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<CountersORM(total_requests={self.total_requests}, total_videos={self.total_videos})>"
