"""Stats Aggregator: read-only summary of the request log and the item table."""

import logging

from tweet_video_api.models.dtos import StatsSnapshot
from tweet_video_api.storage.base_store import VideoStore

logger = logging.getLogger(__name__)


class StatsAggregator:
    def __init__(self, store: VideoStore, top_n: int = 10):
        self.store = store
        self.top_n = top_n

    async def compute_stats(self) -> StatsSnapshot:
        """
        Build the summary view.

        Returns:
            StatsSnapshot: Totals, the ``top_n`` most fetched items, the device
            histogram and the global counters.
        """
        return StatsSnapshot(
            total_requests=await self.store.count_requests(),
            total_videos=await self.store.count_items(),
            popular_videos=await self.store.list_top(self.top_n),
            device_stats=await self.store.device_histogram(),
            counters=await self.store.get_counters(),
        )
