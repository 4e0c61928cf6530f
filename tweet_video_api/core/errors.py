"""
Exception taxonomy for the Twitter video API.

Every error that should reach a client as a JSON envelope derives from
``ApiError`` and carries the HTTP status it maps to.
"""

from typing import Any, Dict, Optional


class ApiError(Exception):
    """Base class for errors rendered as ``{"success": false, "error": ...}``."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None, **extra: Any):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "error": self.message}
        payload.update(self.extra)
        return payload


class InvalidInputError(ApiError):
    """Missing or malformed input."""

    status_code = 400


class UnauthorizedError(ApiError):
    """Missing or incorrect admin secret."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", **extra: Any):
        super().__init__(message, **extra)


class BannedError(ApiError):
    """The origin address is on the ban list."""

    status_code = 403

    def __init__(self, message: str = "Your IP is banned from this service.", **extra: Any):
        super().__init__(message, **extra)


class NotFoundError(ApiError):
    """No download candidates could be extracted, or the route does not exist."""

    status_code = 404


class UpstreamError(ApiError):
    """
    The third-party fetch failed.

    Attributes:
        upstream_status: HTTP status returned by the upstream host, if any.
        reason: Short machine-readable failure class ("timeout", "connect", "status").
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        upstream_status: Optional[int] = None,
        reason: str = "status",
    ):
        self.upstream_status = upstream_status
        self.reason = reason
        extra: Dict[str, Any] = {}
        if upstream_status is not None:
            extra["upstreamStatus"] = upstream_status
        super().__init__(message, status_code=status_code, **extra)


class InternalError(ApiError):
    """Unexpected failure inside the service."""

    status_code = 500


class StoreError(Exception):
    """Raised by storage backends when the underlying store fails."""
