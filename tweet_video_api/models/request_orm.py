"""
SQLAlchemy ORM model for the 'requests' table.
"""

from datetime import datetime

from sqlalchemy import Integer, Text, TIMESTAMP, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base


class RequestRecordORM(Base):
    """One inbound API call, with the client classification computed at record time."""
    __tablename__ = "requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    origin_address: Mapped[str] = mapped_column(Text, nullable=False)
    client_agent_string: Mapped[str] = mapped_column(Text, nullable=False)
    device_class: Mapped[str] = mapped_column(Text, nullable=False)
    browser_class: Mapped[str] = mapped_column(Text, nullable=False)
    platform_class: Mapped[str] = mapped_column(Text, nullable=False)
    target_url: Mapped[str] = mapped_column(Text, nullable=False)
    endpoint_name: Mapped[str] = mapped_column(Text, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_requests_timestamp", "timestamp"),
        Index("idx_requests_device_class", "device_class"),
    )

    def __repr__(self) -> str:
        return f"<RequestRecordORM(origin='{self.origin_address}', endpoint='{self.endpoint_name}')>"
