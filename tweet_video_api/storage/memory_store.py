"""In-process storage backend."""

import itertools
import logging
from collections import Counter, deque
from typing import Deque, Dict, List

from tweet_video_api.models.dtos import (
    BanEntryDTO,
    CountersDTO,
    ExternalItemDTO,
    ExtractionResult,
    RequestRecordDTO,
    UpsertResult,
    utcnow,
)
from tweet_video_api.storage.base_store import check_counter_name

logger = logging.getLogger(__name__)


class MemoryStore:
    """
    Dictionary-backed implementation of the VideoStore protocol.

    None of the coroutines await anything, so each one runs to completion on
    the event loop without interleaving. That is what keeps ``upsert_item``
    atomic per id. State is owned by the instance; each process (or test)
    gets its own.
    """

    backend_name = "memory"

    def __init__(self, request_retention: int = 1000):
        """
        Initialize an empty store.

        Args:
            request_retention: Maximum number of request records kept; the oldest are evicted first.
        """
        self.request_retention = request_retention
        self._items: Dict[str, ExternalItemDTO] = {}
        self._requests: Deque[RequestRecordDTO] = deque(maxlen=request_retention)
        self._bans: Dict[str, BanEntryDTO] = {}
        self._counters = CountersDTO()

    async def init(self) -> None:
        logger.info(f"Using in-memory store (request retention: {self.request_retention})")

    async def close(self) -> None:
        pass

    async def ping(self) -> bool:
        return True

    async def upsert_item(self, external_id: str, extraction: ExtractionResult) -> UpsertResult:
        now = utcnow()
        existing = self._items.get(external_id)
        if existing is not None:
            existing.total_fetches += 1
            existing.last_seen = now
            return UpsertResult(item=existing.model_copy(), created=False)

        item = ExternalItemDTO(
            external_id=external_id,
            author=extraction.tweet_info.author,
            text=extraction.tweet_info.text,
            published_label=extraction.tweet_info.date,
            thumbnail_url=extraction.thumbnail,
            total_fetches=1,
            first_seen=now,
            last_seen=now,
        )
        self._items[external_id] = item
        self._counters.total_videos += 1
        return UpsertResult(item=item.model_copy(), created=True)

    async def list_top(self, limit: int) -> List[ExternalItemDTO]:
        # sorted() is stable and dicts keep insertion order, which gives the tie-break.
        ranked = sorted(self._items.values(), key=lambda item: item.total_fetches, reverse=True)
        return [item.model_copy() for item in ranked[:limit]]

    async def list_items(self) -> List[ExternalItemDTO]:
        return [item.model_copy() for item in self._items.values()]

    async def count_items(self) -> int:
        return len(self._items)

    async def purge_items(self) -> int:
        removed = len(self._items)
        self._items.clear()
        self._counters.total_videos = 0
        return removed

    async def insert_request(self, record: RequestRecordDTO) -> None:
        self._requests.append(record)

    async def list_recent(self, limit: int) -> List[RequestRecordDTO]:
        # Newest first by arrival; records are appended as they are logged.
        return list(itertools.islice(reversed(self._requests), limit))

    async def count_requests(self) -> int:
        return len(self._requests)

    async def device_histogram(self) -> Dict[str, int]:
        return dict(Counter(record.device_class for record in self._requests))

    async def purge_requests(self) -> int:
        removed = len(self._requests)
        self._requests.clear()
        return removed

    async def is_banned(self, address: str) -> bool:
        return address in self._bans

    async def ban(self, address: str) -> bool:
        if address in self._bans:
            return False
        self._bans[address] = BanEntryDTO(address=address)
        return True

    async def unban(self, address: str) -> bool:
        return self._bans.pop(address, None) is not None

    async def list_bans(self) -> List[BanEntryDTO]:
        return list(self._bans.values())

    async def get_counters(self) -> CountersDTO:
        return self._counters.model_copy()

    async def increment_counter(self, name: str) -> None:
        check_counter_name(name)
        setattr(self._counters, name, getattr(self._counters, name) + 1)

    async def reset_counters(self) -> None:
        self._counters = CountersDTO()
