import random
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from tweet_video_api.core.errors import UpstreamError
from tweet_video_api.core.fetcher import USER_AGENTS, TwitsaveFetcher, build_headers
from tweet_video_api.tests.samples import SAMPLE_HTML, STATUS_URL


def make_fetcher(handler) -> TwitsaveFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TwitsaveFetcher("https://twitsave.com", timeout=1.0, client=client)


def test_build_headers_picks_agent_from_pool():
    headers = build_headers(random.Random(3))
    assert headers["User-Agent"] in USER_AGENTS
    assert headers["Accept"].startswith("text/html")


def test_build_target_url_percent_encodes_source():
    fetcher = TwitsaveFetcher("https://twitsave.com/")
    target = fetcher.build_target_url("https://x.com/a/status/1?s=20")
    assert target == "https://twitsave.com/info?url=https%3A%2F%2Fx.com%2Fa%2Fstatus%2F1%3Fs%3D20"


@pytest.mark.asyncio
async def test_fetch_returns_html_and_sends_browser_headers():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        seen["agent"] = request.headers.get("user-agent")
        return httpx.Response(200, text=SAMPLE_HTML)

    fetcher = make_fetcher(handler)
    html = await fetcher.fetch(STATUS_URL)

    assert html == SAMPLE_HTML
    assert seen["url"].path == "/info"
    assert parse_qs(urlparse(str(seen["url"])).query)["url"] == [STATUS_URL]
    assert seen["agent"] in USER_AGENTS


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, message",
    [
        (404, "Tweet not found or Twitsave service unavailable"),
        (403, "Access denied by Twitsave"),
        (429, "Rate limited by Twitsave. Please try again later."),
        (500, "Twitsave returned HTTP 500"),
    ],
)
async def test_non_2xx_maps_to_bad_gateway(status, message):
    fetcher = make_fetcher(lambda request: httpx.Response(status))

    with pytest.raises(UpstreamError) as exc_info:
        await fetcher.fetch(STATUS_URL)

    error = exc_info.value
    assert error.status_code == 502
    assert error.upstream_status == status
    assert error.message == message
    assert error.to_payload()["upstreamStatus"] == status


@pytest.mark.asyncio
async def test_timeout_maps_to_gateway_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        await make_fetcher(handler).fetch(STATUS_URL)

    assert exc_info.value.status_code == 504
    assert exc_info.value.message == "Request timeout"
    assert exc_info.value.reason == "timeout"


@pytest.mark.asyncio
async def test_connection_failure_maps_to_bad_gateway():
    def handler(request):
        raise httpx.ConnectError("name resolution failed", request=request)

    with pytest.raises(UpstreamError) as exc_info:
        await make_fetcher(handler).fetch(STATUS_URL)

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "Cannot connect to Twitsave service"
    assert "upstreamStatus" not in exc_info.value.to_payload()


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open():
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    fetcher = TwitsaveFetcher(client=client)

    await fetcher.close()

    assert not client.is_closed
    await client.aclose()
