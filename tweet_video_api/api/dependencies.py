"""FastAPI dependencies resolving the collaborators stored on ``app.state``."""

from typing import Optional

from fastapi import Header, Request

from tweet_video_api.config.settings import Settings
from tweet_video_api.core.admin_gate import AdminGate, parse_bearer_token
from tweet_video_api.core.client_info import resolve_origin
from tweet_video_api.core.download_service import DownloadService
from tweet_video_api.core.request_logger import LogOutcome, RequestLogger
from tweet_video_api.core.stats_aggregator import StatsAggregator
from tweet_video_api.monitoring.monitor import Monitor
from tweet_video_api.storage.base_store import VideoStore


def client_origin(request: Request) -> str:
    """Origin address of the caller, honoring proxy headers when configured to."""
    peer_host = request.client.host if request.client else None
    trust_proxy_headers = request.app.state.settings.TRUST_PROXY_HEADERS
    return resolve_origin(request.headers, peer_host, trust_proxy_headers)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> VideoStore:
    return request.app.state.store


def get_download_service(request: Request) -> DownloadService:
    return request.app.state.download_service


def get_stats_aggregator(request: Request) -> StatsAggregator:
    return request.app.state.stats_aggregator


def get_monitor(request: Request) -> Monitor:
    return request.app.state.monitor


async def record_api_call(request: Request, target_url: str, endpoint_name: str) -> LogOutcome:
    """Best-effort request record for endpoints that take no source URL."""
    request_logger: RequestLogger = request.app.state.request_logger
    return await request_logger.record(
        client_origin(request),
        request.headers.get("user-agent"),
        target_url,
        endpoint_name,
    )


async def require_admin(request: Request, authorization: Optional[str] = Header(None)) -> None:
    """
    Gate for administrative routes.

    Raises:
        UnauthorizedError: Missing or wrong ``Authorization: Bearer <secret>`` header.
    """
    gate: AdminGate = request.app.state.admin_gate
    gate.authorize(parse_bearer_token(authorization))
