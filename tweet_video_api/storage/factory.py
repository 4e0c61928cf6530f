"""Selects and builds the configured storage backend."""

import logging
from pathlib import Path

from tweet_video_api.config.settings import Settings
from tweet_video_api.storage.base_store import VideoStore
from tweet_video_api.storage.hosted_store import HostedStore
from tweet_video_api.storage.memory_store import MemoryStore
from tweet_video_api.storage.sql_store import SQLStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> VideoStore:
    """
    Build the store selected by ``settings.resolved_backend``.

    A backend whose credentials are missing falls back to the in-memory
    store; the fallback is logged as a warning.
    """
    backend = settings.resolved_backend

    if backend in ("sqlite", "postgres"):
        database_url = settings.sql_database_url
        if database_url:
            if database_url.startswith("sqlite") and "///" in database_url:
                _ensure_sqlite_directory(database_url)
            logger.info(f"Selected {backend} store")
            return SQLStore(database_url, echo=settings.DEBUG)
        logger.warning(f"No database URL for the {backend} backend; falling back to the in-memory store")

    elif backend == "hosted":
        if settings.HOSTED_URL and settings.HOSTED_KEY:
            logger.info("Selected hosted store")
            return HostedStore(settings.HOSTED_URL, settings.HOSTED_KEY, timeout=settings.HOSTED_TIMEOUT_SECONDS)
        logger.warning("HOSTED_URL/HOSTED_KEY missing; falling back to the in-memory store")

    return MemoryStore(request_retention=settings.REQUEST_LOG_RETENTION)


def _ensure_sqlite_directory(database_url: str) -> None:
    path = database_url.split("///", 1)[1]
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
