import httpx
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock

from tweet_video_api.api.main import create_app
from tweet_video_api.config.settings import Settings
from tweet_video_api.core.fetcher import TwitsaveFetcher
from tweet_video_api.monitoring.monitor import Monitor
from tweet_video_api.storage.memory_store import MemoryStore
from tweet_video_api.tests.samples import ADMIN_KEY, SAMPLE_HTML


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        ADMIN_KEY=ADMIN_KEY,
        STORE_BACKEND="memory",
        DEBUG=False,
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore(request_retention=100)


@pytest.fixture
def mock_fetcher() -> AsyncMock:
    """Fetcher double returning SAMPLE_HTML; tests override ``fetch`` as needed."""
    fetcher = AsyncMock(spec=TwitsaveFetcher)
    fetcher.fetch.return_value = SAMPLE_HTML
    return fetcher


@pytest.fixture
def app(test_settings, memory_store, mock_fetcher):
    return create_app(settings=test_settings, store=memory_store, fetcher=mock_fetcher, monitor=Monitor())


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_KEY}"}
