"""Prometheus metrics for monitoring the Twitter video API."""

import logging

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

# Define metrics
HTTP_REQUESTS = Counter(
    "tweet_video_api_http_requests_total",
    "Total number of HTTP requests handled",
    ["method", "endpoint", "status"],
)

REQUEST_DURATION = Histogram(
    "tweet_video_api_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["endpoint"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 15.0, 30.0],
)

UPSTREAM_ERRORS = Counter(
    "tweet_video_api_upstream_errors_total",
    "Number of failed fetches from the upstream site",
    ["reason"],
)

BANNED_REQUESTS = Counter(
    "tweet_video_api_banned_requests_total",
    "Number of requests rejected because the origin is banned",
)

VIDEOS_CREATED = Counter(
    "tweet_video_api_videos_created_total",
    "Number of videos stored for the first time",
)


class PrometheusExporter:
    """Records application events into the module-level Prometheus metrics."""

    def record_request(self, method: str, endpoint: str, status: int, duration_seconds: float) -> None:
        """
        Record a handled HTTP request.

        Args:
            method: HTTP method.
            endpoint: Route path (the template, not the raw URL, to keep label cardinality bounded).
            status: Response status code.
            duration_seconds: Wall time spent handling the request.
        """
        HTTP_REQUESTS.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        REQUEST_DURATION.labels(endpoint=endpoint).observe(duration_seconds)

    def record_upstream_error(self, reason: str) -> None:
        UPSTREAM_ERRORS.labels(reason=reason).inc()

    def record_banned_request(self) -> None:
        BANNED_REQUESTS.inc()

    def record_video_created(self) -> None:
        VIDEOS_CREATED.inc()

    @staticmethod
    def render() -> tuple[bytes, str]:
        """Return the exposition payload and its content type."""
        return generate_latest(), CONTENT_TYPE_LATEST
