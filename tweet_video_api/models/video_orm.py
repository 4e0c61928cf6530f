"""
SQLAlchemy ORM models for the 'videos' and 'download_links' tables.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, Text, TIMESTAMP, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from .base import Base


class VideoORM(Base):
    """
    Aggregate usage record for one resolved status.

    Attributes:
        id (int): Surrogate key; also the insertion order used to break ties in rankings.
        external_id (str): Status identifier resolved from the source URL. Unique.
        author (str): Author label taken from the first extraction.
        text (str): Status text taken from the first extraction.
        published_label (str): Date label as printed by the upstream page.
        thumbnail_url (str, optional): Poster image of the video.
        total_fetches (int): Number of successful extractions for this status.
        first_seen (datetime): Timestamp of the first successful extraction.
        last_seen (datetime): Timestamp of the latest successful extraction.
    """
    __tablename__ = "videos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(Text, nullable=False, comment="Status identifier resolved from the source URL.")
    author: Mapped[str] = mapped_column(Text, nullable=False, default="")
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    published_label: Mapped[str] = mapped_column(Text, nullable=False, default="")
    thumbnail_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_fetches: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    first_seen: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    last_seen: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("external_id", name="uq_videos_external_id"),
        Index("idx_videos_total_fetches", "total_fetches"),
    )

    def __repr__(self) -> str:
        return f"<VideoORM(external_id='{self.external_id}', total_fetches={self.total_fetches})>"


class DownloadLinkORM(Base):
    """Download candidate seen for a status, counted per (external_id, url)."""
    __tablename__ = "download_links"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    quality: Mapped[str] = mapped_column(Text, nullable=False)
    resolution: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(Text, nullable=False, default="mp4")
    source: Mapped[str] = mapped_column(Text, nullable=False, default="twitsave")
    fetch_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("external_id", "url", name="uq_download_links_external_id_url"),
    )

    def __repr__(self) -> str:
        return f"<DownloadLinkORM(external_id='{self.external_id}', resolution='{self.resolution}')>"
