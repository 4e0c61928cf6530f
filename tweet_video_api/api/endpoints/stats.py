"""Public statistics endpoints."""

import logging

from fastapi import APIRouter, Depends, Request

from tweet_video_api.api.dependencies import get_settings, get_stats_aggregator, get_store, record_api_call
from tweet_video_api.config.settings import Settings
from tweet_video_api.core.stats_aggregator import StatsAggregator
from tweet_video_api.storage.base_store import VideoStore

router = APIRouter()
logger = logging.getLogger(__name__)

STATS_ENDPOINT = "/api/stats"
STATS_TARGET = "STATS_REQUEST"


@router.get("/stats")
async def get_stats(
    request: Request,
    aggregator: StatsAggregator = Depends(get_stats_aggregator),
    store: VideoStore = Depends(get_store),
):
    """Totals, most downloaded videos and the device histogram."""
    snapshot = await aggregator.compute_stats()
    # Recorded after the snapshot so a stats call does not count itself.
    await record_api_call(request, STATS_TARGET, STATS_ENDPOINT)
    return {
        "success": True,
        "statistics": snapshot.model_dump(mode="json", by_alias=True),
        "database": store.backend_name,
    }


@router.get("/requests/recent")
async def get_recent_requests(
    store: VideoStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    records = await store.list_recent(settings.RECENT_REQUESTS_LIMIT)
    return {
        "success": True,
        "recentRequests": [record.model_dump(mode="json") for record in records],
        "total": len(records),
        "database": store.backend_name,
    }
