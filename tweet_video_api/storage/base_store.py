"""Defines the protocol every storage backend implements."""

from typing import Dict, List, Protocol

from tweet_video_api.models.dtos import (
    BanEntryDTO,
    CountersDTO,
    ExternalItemDTO,
    ExtractionResult,
    RequestRecordDTO,
    UpsertResult,
)

COUNTER_NAMES = ("total_requests", "total_videos")


class VideoStore(Protocol):
    """A protocol that defines the interface for storage backends."""

    backend_name: str

    async def init(self) -> None:
        """Prepares the backend (schema, connections). Idempotent."""
        ...

    async def close(self) -> None:
        ...

    async def ping(self) -> bool:
        """True when the backend is reachable."""
        ...

    async def upsert_item(self, external_id: str, extraction: ExtractionResult) -> UpsertResult:
        """Creates the item with total_fetches=1 or increments it atomically."""
        ...

    async def list_top(self, limit: int) -> List[ExternalItemDTO]:
        """Items by total_fetches descending, ties broken by insertion order."""
        ...

    async def list_items(self) -> List[ExternalItemDTO]:
        ...

    async def count_items(self) -> int:
        ...

    async def purge_items(self) -> int:
        """Deletes every item and zeroes the total_videos counter."""
        ...

    async def insert_request(self, record: RequestRecordDTO) -> None:
        ...

    async def list_recent(self, limit: int) -> List[RequestRecordDTO]:
        """Most recent request records first."""
        ...

    async def count_requests(self) -> int:
        ...

    async def device_histogram(self) -> Dict[str, int]:
        ...

    async def purge_requests(self) -> int:
        ...

    async def is_banned(self, address: str) -> bool:
        ...

    async def ban(self, address: str) -> bool:
        """Adds a ban entry; False if the address was already banned."""
        ...

    async def unban(self, address: str) -> bool:
        ...

    async def list_bans(self) -> List[BanEntryDTO]:
        ...

    async def get_counters(self) -> CountersDTO:
        ...

    async def increment_counter(self, name: str) -> None:
        ...

    async def reset_counters(self) -> None:
        ...


def check_counter_name(name: str) -> str:
    if name not in COUNTER_NAMES:
        raise ValueError(f"Unknown counter '{name}'. Expected one of {', '.join(COUNTER_NAMES)}")
    return name
