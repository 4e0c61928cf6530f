"""
Administrative endpoints.

Every route requires ``Authorization: Bearer <ADMIN_KEY>``. The check is a
router-level dependency, so it runs before the request body is validated.
"""

import logging

from fastapi import APIRouter, Depends

from tweet_video_api.api.dependencies import get_monitor, get_settings, get_store, require_admin
from tweet_video_api.config.settings import Settings
from tweet_video_api.core.errors import InvalidInputError
from tweet_video_api.models.dtos import BanRequest
from tweet_video_api.monitoring.monitor import Monitor
from tweet_video_api.storage.base_store import VideoStore
from tweet_video_api.utils.logging_utils import get_recent_log_handler

router = APIRouter(dependencies=[Depends(require_admin)])
logger = logging.getLogger(__name__)


def _require_ip(body: BanRequest) -> str:
    address = (body.ip or "").strip()
    if not address:
        raise InvalidInputError("IP required")
    return address


@router.get("/data")
async def get_admin_data(store: VideoStore = Depends(get_store)):
    """Counters, every stored video and the retained request log."""
    counters = await store.get_counters()
    videos = await store.list_items()
    requests = await store.list_recent(await store.count_requests())
    return {
        "success": True,
        "stats": counters.model_dump(),
        "videos": [video.model_dump(mode="json") for video in videos],
        "requests": [record.model_dump(mode="json") for record in requests],
    }


@router.post("/ban")
async def ban_address(body: BanRequest, store: VideoStore = Depends(get_store)):
    address = _require_ip(body)
    added = await store.ban(address)
    logger.warning(f"Banned {address}" if added else f"{address} was already banned")
    return {"success": True, "ip": address, "added": added}


@router.post("/unban")
async def unban_address(body: BanRequest, store: VideoStore = Depends(get_store)):
    address = _require_ip(body)
    removed = await store.unban(address)
    logger.info(f"Unbanned {address}" if removed else f"{address} was not banned")
    return {"success": True, "ip": address, "removed": removed}


@router.get("/bans")
async def list_bans(store: VideoStore = Depends(get_store)):
    bans = await store.list_bans()
    return {"success": True, "bans": [entry.model_dump(mode="json") for entry in bans]}


@router.post("/reset-stats")
async def reset_stats(store: VideoStore = Depends(get_store)):
    await store.reset_counters()
    logger.info("Counters reset by admin")
    return {"success": True}


@router.post("/clear-requests")
async def clear_requests(store: VideoStore = Depends(get_store)):
    removed = await store.purge_requests()
    logger.info(f"Request log cleared by admin ({removed} records)")
    return {"success": True, "removed": removed}


@router.post("/clear-videos")
async def clear_videos(store: VideoStore = Depends(get_store)):
    removed = await store.purge_items()
    logger.info(f"Videos cleared by admin ({removed} videos)")
    return {"success": True, "removed": removed}


@router.get("/logs")
async def get_logs(settings: Settings = Depends(get_settings)):
    """Most recent operational log lines, newest first."""
    return {"success": True, "logs": get_recent_log_handler().recent(settings.ADMIN_LOG_LINES)}


@router.get("/monitor")
async def get_monitor_snapshot(monitor: Monitor = Depends(get_monitor)):
    return {"success": True, "monitor": monitor.snapshot()}
