"""
In-process request monitor.

Tracks uptime, request rate over a sliding window, average latency and the
most recent errors for the admin monitor view.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ErrorEntry:
    timestamp: datetime
    method: str
    path: str
    status: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "method": self.method,
            "path": self.path,
            "status": self.status,
            "message": self.message,
        }


@dataclass
class Monitor:
    """
    Rolling request statistics.

    Attributes:
        window_seconds: Width of the requests-per-second window.
        max_errors: Number of recent errors kept.
        clock: Monotonic time source, injectable for tests.
    """

    window_seconds: float = 60.0
    max_errors: int = 20
    latency_samples: int = 1000
    clock: Callable[[], float] = time.monotonic
    total_requests: int = 0
    total_errors: int = 0
    _started: float = field(init=False)
    _hits: Deque[float] = field(init=False)
    _latencies: Deque[float] = field(init=False)
    _errors: Deque[ErrorEntry] = field(init=False)

    def __post_init__(self) -> None:
        self._started = self.clock()
        self._hits = deque()
        self._latencies = deque(maxlen=self.latency_samples)
        self._errors = deque(maxlen=self.max_errors)

    def record(self, method: str, path: str, status: int, duration_seconds: float,
               message: Optional[str] = None) -> None:
        """Record one finished request. Statuses >= 400 are also kept as recent errors."""
        now = self.clock()
        self.total_requests += 1
        self._hits.append(now)
        self._latencies.append(duration_seconds)
        self._trim(now)
        if status >= 400:
            self.total_errors += 1
            self._errors.append(ErrorEntry(
                timestamp=datetime.now(timezone.utc),
                method=method,
                path=path,
                status=status,
                message=message or "",
            ))

    def _trim(self, now: float) -> None:
        cutoff = now - self.window_seconds
        while self._hits and self._hits[0] < cutoff:
            self._hits.popleft()

    @property
    def uptime_seconds(self) -> float:
        return self.clock() - self._started

    def requests_per_second(self) -> float:
        now = self.clock()
        self._trim(now)
        window = min(self.window_seconds, max(now - self._started, 1e-9))
        return len(self._hits) / window

    def average_latency_ms(self) -> float:
        if not self._latencies:
            return 0.0
        return sum(self._latencies) / len(self._latencies) * 1000

    def recent_errors(self) -> List[ErrorEntry]:
        """Newest first."""
        return list(reversed(self._errors))

    def snapshot(self) -> Dict[str, Any]:
        return {
            "uptimeSeconds": round(self.uptime_seconds, 3),
            "totalRequests": self.total_requests,
            "totalErrors": self.total_errors,
            "requestsPerSecond": round(self.requests_per_second(), 3),
            "averageLatencyMs": round(self.average_latency_ms(), 3),
            "recentErrors": [entry.to_dict() for entry in self.recent_errors()],
        }
