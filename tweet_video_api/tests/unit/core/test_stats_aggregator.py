import pytest

from tweet_video_api.core.request_logger import RequestLogger
from tweet_video_api.core.stats_aggregator import StatsAggregator
from tweet_video_api.storage.memory_store import MemoryStore
from tweet_video_api.tests.samples import DESKTOP_AGENT, MOBILE_AGENT, STATUS_URL, make_extraction


@pytest.mark.asyncio
async def test_compute_stats_on_empty_store():
    snapshot = await StatsAggregator(MemoryStore()).compute_stats()

    assert snapshot.total_requests == 0
    assert snapshot.total_videos == 0
    assert snapshot.popular_videos == []
    assert snapshot.device_stats == {}


@pytest.mark.asyncio
async def test_device_histogram_and_totals():
    store = MemoryStore()
    logger = RequestLogger(store)
    await logger.record("10.0.0.1", MOBILE_AGENT, STATUS_URL, "/api/download")
    await logger.record("10.0.0.2", MOBILE_AGENT, STATUS_URL, "/api/download")
    await logger.record("10.0.0.3", DESKTOP_AGENT, STATUS_URL, "/api/download")
    await store.upsert_item("20", make_extraction())

    snapshot = await StatsAggregator(store).compute_stats()

    assert snapshot.total_requests == 3
    assert snapshot.total_videos == 1
    assert snapshot.device_stats == {"Mobile": 2, "Desktop": 1}
    assert snapshot.counters.total_videos == 1


@pytest.mark.asyncio
async def test_popular_videos_limited_and_ordered():
    store = MemoryStore()
    for external_id, fetches in [("1", 1), ("2", 3), ("3", 2), ("4", 3)]:
        for _ in range(fetches):
            await store.upsert_item(external_id, make_extraction())

    snapshot = await StatsAggregator(store, top_n=3).compute_stats()

    assert [item.external_id for item in snapshot.popular_videos] == ["2", "4", "3"]


@pytest.mark.asyncio
async def test_snapshot_serializes_with_camel_case_keys():
    snapshot = await StatsAggregator(MemoryStore()).compute_stats()
    payload = snapshot.model_dump(mode="json", by_alias=True)

    assert set(payload) == {"totalRequests", "totalVideos", "popularVideos", "deviceStats", "counters"}
    assert payload["counters"] == {"total_requests": 0, "total_videos": 0}
