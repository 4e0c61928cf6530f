"""Download endpoint: resolves the download candidates for a status URL."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from tweet_video_api.api.dependencies import client_origin, get_download_service
from tweet_video_api.core.download_service import DownloadService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/download")
async def download(
    request: Request,
    url: Optional[str] = Query(None, description="twitter.com or x.com status URL"),
    service: DownloadService = Depends(get_download_service),
):
    """
    Resolve downloadable video links for a status URL.

    Returns:
        dict: ``DownloadResponse`` serialized with camelCase keys.

    Raises:
        InvalidInputError: Missing or malformed URL (400).
        UpstreamError: The upstream site failed (502/504).
        NotFoundError: No download links on the page (404).
    """
    result = await service.download(
        url,
        origin=client_origin(request),
        agent_string=request.headers.get("user-agent"),
    )
    return result.model_dump(mode="json", by_alias=True)
