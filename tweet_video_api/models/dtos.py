"""
Pydantic Data Transfer Objects (DTOs) for the Twitter video API.

These models are used for API request/response validation and for moving
data between the pipeline components and the storage backends.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base for models serialized to the camelCase JSON the clients expect."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TweetInfo(CamelModel):
    """Metadata scraped from the upstream page. Missing elements default to empty/"Unknown"."""
    author: str = "Unknown"
    text: str = ""
    date: str = ""
    tweet_url: Optional[str] = None


class DownloadCandidate(BaseModel):
    """
    One downloadable rendition discovered on the upstream page.

    ``quality`` is one of "hd", "sd", "low" or "unknown".
    """
    url: str
    quality: str = "unknown"
    resolution: str = "unknown"
    type: str = "mp4"
    source: str = "twitsave"


class ExtractionResult(CamelModel):
    """Structured output of the extractor for one upstream HTML document."""
    twitter_url: str
    tweet_info: TweetInfo = Field(default_factory=TweetInfo)
    download_links: List[DownloadCandidate] = Field(default_factory=list)
    thumbnail: Optional[str] = None
    video_preview: Optional[str] = None

    @property
    def total_videos_found(self) -> int:
        return len(self.download_links)


class ExternalItemDTO(BaseModel):
    """
    Durable aggregate record keyed by the resolved status identifier.

    Mirrors VideoORM.
    """
    external_id: str
    author: str = ""
    text: str = ""
    published_label: str = ""
    thumbnail_url: Optional[str] = None
    total_fetches: int = Field(1, ge=1)
    first_seen: datetime = Field(default_factory=utcnow)
    last_seen: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(from_attributes=True)


class UpsertResult(BaseModel):
    """Outcome of ``upsert_item``: the stored item and whether this call created it."""
    item: ExternalItemDTO
    created: bool


class RequestRecordDTO(BaseModel):
    """
    One inbound API call. Mirrors RequestRecordORM.

    ``device_class`` is one of "Desktop", "Mobile" or "Tablet".
    """
    origin_address: str
    client_agent_string: str
    device_class: str
    browser_class: str
    platform_class: str
    target_url: str
    endpoint_name: str
    timestamp: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(from_attributes=True)


class BanEntryDTO(BaseModel):
    address: str
    created_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(from_attributes=True)


class CountersDTO(BaseModel):
    total_requests: int = 0
    total_videos: int = 0

    model_config = ConfigDict(from_attributes=True)


class StatsSnapshot(CamelModel):
    """Summary view computed by the stats aggregator."""
    total_requests: int
    total_videos: int
    popular_videos: List[ExternalItemDTO]
    device_stats: Dict[str, int]
    counters: CountersDTO


class DownloadResponse(CamelModel):
    """Body of a successful ``/api/download`` call."""
    success: bool = True
    twitter_url: str
    tweet_id: str
    tweet_info: TweetInfo
    download_links: List[DownloadCandidate]
    total_videos_found: int
    thumbnail: Optional[str] = None
    video_preview: Optional[str] = None
    api_version: str
    database: str


class BanRequest(BaseModel):
    """Body of ``POST /api/admin/ban`` and ``/api/admin/unban``."""
    ip: Optional[str] = None
