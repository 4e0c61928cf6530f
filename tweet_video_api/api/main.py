"""
FastAPI application for the Twitter video download API.

This module initializes and configures the FastAPI application: storage
backend selection, the upstream fetcher, ban and request-counter middleware,
JSON error envelopes and the public, admin and health routes.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from tweet_video_api.api.dependencies import client_origin, record_api_call
from tweet_video_api.api.endpoints import admin, download, stats
from tweet_video_api.config.settings import Settings, settings as default_settings
from tweet_video_api.core.admin_gate import AdminGate
from tweet_video_api.core.download_service import DownloadService
from tweet_video_api.core.errors import ApiError, BannedError, InternalError, StoreError, UpstreamError
from tweet_video_api.core.extractor import TwitsaveExtractor
from tweet_video_api.core.fetcher import TwitsaveFetcher
from tweet_video_api.core.stats_aggregator import StatsAggregator
from tweet_video_api.monitoring.metrics import PrometheusExporter
from tweet_video_api.monitoring.monitor import Monitor
from tweet_video_api.storage.base_store import VideoStore
from tweet_video_api.storage.factory import build_store
from tweet_video_api.utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

HEALTH_TARGET = "HEALTH_CHECK"

ENDPOINT_DESCRIPTIONS = {
    "/api/download": "Get download links for Twitter video",
    "/api/stats": "Get API usage statistics",
    "/api/requests/recent": "Get recent API requests",
    "/health": "Service health check",
    "/metrics": "Prometheus metrics",
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Prepares the store on startup, reports configuration problems, and
    releases the store and the fetcher's HTTP client on shutdown.
    """
    app_settings: Settings = app.state.settings
    setup_logging(Path(app_settings.LOGGING_CONFIG_PATH))

    # Startup
    logger.info(f"Starting {app_settings.APP_NAME} v{app_settings.APP_VERSION}")
    for warning in app_settings.startup_warnings():
        logger.warning(warning)

    store: VideoStore = app.state.store
    await store.init()
    logger.info(f"Using {store.backend_name} store")

    yield

    # Shutdown
    logger.info("Shutting down application")
    await app.state.fetcher.close()
    await store.close()


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[VideoStore] = None,
    fetcher: Optional[TwitsaveFetcher] = None,
    extractor: Optional[TwitsaveExtractor] = None,
    monitor: Optional[Monitor] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Every collaborator is built here and placed on ``app.state`` so the
    routes can resolve them through dependencies. Tests pass their own.

    Args:
        settings: Configuration; the module-level settings when omitted.
        store: Storage backend; selected from the settings when omitted.
        fetcher: Upstream fetcher; built from the settings when omitted.
        extractor: HTML extractor; built from the settings when omitted.
        monitor: In-process request monitor.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or default_settings

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""Resolve downloadable video links for twitter.com / x.com status URLs.

        This API provides endpoints for:
        - Resolving download links through twitsave.com
        - Usage statistics and the recent request log
        - Administrative operations (bans, counters, purges, logs)
        - Health and Prometheus monitoring""",
        lifespan=lifespan,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url=None,
        openapi_tags=[
            {"name": "download", "description": "Video link resolution"},
            {"name": "stats", "description": "Usage statistics"},
            {"name": "admin", "description": "Administrative operations"},
            {"name": "health", "description": "Health check and monitoring"},
        ],
    )

    app.state.settings = settings
    app.state.store = store or build_store(settings)
    app.state.fetcher = fetcher or TwitsaveFetcher(settings.TWITSAVE_BASE_URL, timeout=settings.FETCH_TIMEOUT_SECONDS)
    app.state.extractor = extractor or TwitsaveExtractor(settings.TWITSAVE_BASE_URL)
    app.state.monitor = monitor or Monitor()
    app.state.exporter = PrometheusExporter()
    app.state.admin_gate = AdminGate(settings.ADMIN_KEY)
    app.state.download_service = DownloadService(
        app.state.store, app.state.fetcher, app.state.extractor,
        api_version=settings.APP_VERSION, exporter=app.state.exporter,
    )
    app.state.stats_aggregator = StatsAggregator(app.state.store, top_n=settings.STATS_TOP_N)
    app.state.request_logger = app.state.download_service.request_logger

    _register_exception_handlers(app)
    _register_middleware(app, settings)

    # Include API routers
    app.include_router(download.router, prefix="/api", tags=["download"])
    app.include_router(stats.router, prefix="/api", tags=["stats"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    @app.get("/api", tags=["health"], summary="Service index")
    async def api_index():
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "description": "API for downloading Twitter videos",
            "database": app.state.store.backend_name,
            "endpoints": ENDPOINT_DESCRIPTIONS,
        }

    @app.get("/health", tags=["health"], summary="Health Check")
    async def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            dict: Service status, timestamp and store connectivity with the
            number of retained request records.
        """
        store: VideoStore = app.state.store
        database = {"type": store.backend_name, "connected": await store.ping()}
        if database["connected"]:
            try:
                database["totalRequests"] = await store.count_requests()
            except StoreError as e:
                database["connected"] = False
                database["error"] = str(e)
        if store.backend_name == "memory":
            database["note"] = "Using in-memory database for local development"
        await record_api_call(request, HEALTH_TARGET, "/health")
        return JSONResponse(
            status_code=200 if database["connected"] else 500,
            content={
                "status": "OK" if database["connected"] else "ERROR",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "database": database,
                "service": settings.APP_NAME,
                "version": settings.APP_VERSION,
            },
        )

    @app.get("/metrics", tags=["health"], summary="Prometheus metrics")
    async def metrics():
        payload, content_type = app.state.exporter.render()
        return Response(content=payload, media_type=content_type)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def handle_api_error(request: Request, exc: ApiError):
        if isinstance(exc, UpstreamError):
            app.state.exporter.record_upstream_error(exc.reason)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(f"Store failure on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content=InternalError(str(exc)).to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=400, content={"success": False, "error": message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": message})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content=InternalError("Internal server error").to_payload())


def _register_middleware(app: FastAPI, settings: Settings) -> None:
    # Registered innermost first: counting runs inside the ban check, CORS wraps both.

    def _record(request: Request, status: int, duration: float, message: Optional[str] = None) -> None:
        path = _route_path(request)
        app.state.exporter.record_request(request.method, path, status, duration)
        app.state.monitor.record(request.method, request.url.path, status, duration, message)

    @app.middleware("http")
    async def track_requests(request: Request, call_next):
        start = time.perf_counter()
        try:
            await app.state.store.increment_counter("total_requests")
        except StoreError as e:
            logger.warning(f"Request counter error: {e}")

        try:
            response = await call_next(request)
        except Exception:
            _record(request, 500, time.perf_counter() - start, "Internal server error")
            raise
        _record(request, response.status_code, time.perf_counter() - start)
        return response

    @app.middleware("http")
    async def reject_banned_origins(request: Request, call_next):
        origin = client_origin(request)
        try:
            banned = await app.state.store.is_banned(origin)
        except StoreError as e:
            logger.warning(f"Ban check failed for {origin}, letting the request through: {e}")
            banned = False
        if banned:
            logger.info(f"Rejected request from banned origin {origin}")
            app.state.exporter.record_banned_request()
            return JSONResponse(status_code=403, content=BannedError().to_payload())
        return await call_next(request)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS if not settings.DEBUG else ["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Create the application instance
app = create_app()
