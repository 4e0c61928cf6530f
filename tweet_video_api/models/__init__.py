"""
Models package for the Twitter video API.

This package contains SQLAlchemy ORM models and Pydantic DTOs.
"""

# Ensure all ORM models are registered with the Base metadata when this package is imported.
from . import base
from . import admin_orm
from . import request_orm
from . import video_orm

# Import Base and ORM models for easy access
from .base import Base
from .admin_orm import BanEntryORM, CountersORM, COUNTERS_ROW_ID
from .request_orm import RequestRecordORM
from .video_orm import DownloadLinkORM, VideoORM

# Import DTOs for easy access
from .dtos import (
    BanEntryDTO,
    BanRequest,
    CountersDTO,
    DownloadCandidate,
    DownloadResponse,
    ExternalItemDTO,
    ExtractionResult,
    RequestRecordDTO,
    StatsSnapshot,
    TweetInfo,
    UpsertResult,
)

# Define what is exported with 'from tweet_video_api.models import *'
__all__ = [
    # Base
    "Base",
    # ORMs
    "BanEntryORM",
    "CountersORM",
    "COUNTERS_ROW_ID",
    "DownloadLinkORM",
    "RequestRecordORM",
    "VideoORM",
    # DTOs
    "BanEntryDTO",
    "BanRequest",
    "CountersDTO",
    "DownloadCandidate",
    "DownloadResponse",
    "ExternalItemDTO",
    "ExtractionResult",
    "RequestRecordDTO",
    "StatsSnapshot",
    "TweetInfo",
    "UpsertResult",
]
