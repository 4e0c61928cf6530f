"""
Download pipeline.

Validates the source URL, records the request, fetches the upstream info
page, extracts download candidates and upserts the usage counters.
"""

import logging
from typing import Optional

from tweet_video_api.core.errors import InvalidInputError, NotFoundError
from tweet_video_api.core.extractor import TwitsaveExtractor
from tweet_video_api.core.fetcher import TwitsaveFetcher
from tweet_video_api.core.identifier import is_supported_url, resolve_id
from tweet_video_api.core.request_logger import RequestLogger
from tweet_video_api.models.dtos import DownloadResponse
from tweet_video_api.monitoring.metrics import PrometheusExporter
from tweet_video_api.storage.base_store import VideoStore

logger = logging.getLogger(__name__)

DOWNLOAD_ENDPOINT = "/api/download"


class DownloadService:
    """Orchestrates one ``/api/download`` call against the injected collaborators."""

    def __init__(
        self,
        store: VideoStore,
        fetcher: TwitsaveFetcher,
        extractor: TwitsaveExtractor,
        api_version: str,
        exporter: Optional[PrometheusExporter] = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.extractor = extractor
        self.api_version = api_version
        self.exporter = exporter or PrometheusExporter()
        self.request_logger = RequestLogger(store)

    @staticmethod
    def validate(source_url: Optional[str]) -> str:
        """
        Check the source URL and resolve its status id.

        Returns:
            str: The resolved external id.

        Raises:
            InvalidInputError: When the URL is missing, not a twitter.com/x.com URL, or has no status id.
        """
        if not source_url:
            raise InvalidInputError("Twitter URL is required")
        if not is_supported_url(source_url):
            raise InvalidInputError("Invalid Twitter URL. Must be from twitter.com or x.com")
        external_id = resolve_id(source_url)
        if external_id is None:
            raise InvalidInputError("Could not extract tweet ID from URL")
        return external_id

    async def download(
        self,
        source_url: Optional[str],
        origin: str,
        agent_string: Optional[str],
    ) -> DownloadResponse:
        """
        Run the full pipeline for one source URL.

        Args:
            source_url: The status URL supplied by the client.
            origin: Resolved origin address of the caller.
            agent_string: Raw ``User-Agent`` header of the caller.

        Returns:
            DownloadResponse: Metadata and download candidates.

        Raises:
            InvalidInputError: Bad URL, raised before any logging or fetch.
            UpstreamError: The upstream fetch failed.
            NotFoundError: The page contained no download candidates.
            StoreError: The upsert failed.
        """
        external_id = self.validate(source_url)

        outcome = await self.request_logger.record(origin, agent_string, source_url, DOWNLOAD_ENDPOINT)
        if not outcome.ok:
            logger.debug(f"Continuing without a request record: {outcome.error}")

        html = await self.fetcher.fetch(source_url)
        extraction = self.extractor.extract(html, source_url)
        if not extraction.download_links:
            logger.info(f"No download links found for tweet {external_id}")
            raise NotFoundError("No download links found")

        result = await self.store.upsert_item(external_id, extraction)
        if result.created:
            self.exporter.record_video_created()
        logger.info(
            f"Tweet {external_id}: {extraction.total_videos_found} links, "
            f"fetched {result.item.total_fetches} time(s)"
        )

        return DownloadResponse(
            twitter_url=source_url,
            tweet_id=external_id,
            tweet_info=extraction.tweet_info,
            download_links=extraction.download_links,
            total_videos_found=extraction.total_videos_found,
            thumbnail=extraction.thumbnail,
            video_preview=extraction.video_preview,
            api_version=self.api_version,
            database=self.store.backend_name,
        )
