import pytest

from tweet_video_api.monitoring.metrics import HTTP_REQUESTS, PrometheusExporter
from tweet_video_api.monitoring.monitor import Monitor


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


def test_uptime_tracks_clock(clock):
    monitor = Monitor(clock=clock)
    clock.now += 12.5
    assert monitor.uptime_seconds == pytest.approx(12.5)


def test_requests_per_second_uses_sliding_window(clock):
    monitor = Monitor(window_seconds=60.0, clock=clock)
    clock.now += 120
    for _ in range(30):
        monitor.record("GET", "/api/stats", 200, 0.01)

    assert monitor.requests_per_second() == pytest.approx(0.5)

    clock.now += 61
    assert monitor.requests_per_second() == 0.0
    assert monitor.total_requests == 30


def test_average_latency_and_errors(clock):
    monitor = Monitor(max_errors=2, clock=clock)
    monitor.record("GET", "/api/download", 200, 0.100)
    monitor.record("GET", "/api/download", 502, 0.300, "Cannot connect to Twitsave service")
    monitor.record("GET", "/nope", 404, 0.001)
    monitor.record("POST", "/api/admin/ban", 401, 0.001)

    assert monitor.average_latency_ms() == pytest.approx(100.5)
    assert monitor.total_errors == 3
    errors = monitor.recent_errors()
    assert [entry.path for entry in errors] == ["/api/admin/ban", "/nope"]


def test_snapshot_shape(clock):
    snapshot = Monitor(clock=clock).snapshot()
    assert set(snapshot) == {
        "uptimeSeconds", "totalRequests", "totalErrors",
        "requestsPerSecond", "averageLatencyMs", "recentErrors",
    }
    assert snapshot["averageLatencyMs"] == 0.0


def test_exporter_records_requests():
    exporter = PrometheusExporter()
    labels = {"method": "GET", "endpoint": "/api/test-metric", "status": "200"}
    before = HTTP_REQUESTS.labels(**labels)._value.get()

    exporter.record_request("GET", "/api/test-metric", 200, 0.05)

    assert HTTP_REQUESTS.labels(**labels)._value.get() == before + 1
    payload, content_type = exporter.render()
    assert b"tweet_video_api_http_requests_total" in payload
    assert content_type.startswith("text/plain")
