import asyncio

import pytest
import pytest_asyncio
from sqlalchemy import select

from tweet_video_api.core.errors import StoreError
from tweet_video_api.models.dtos import DownloadCandidate, RequestRecordDTO
from tweet_video_api.models.video_orm import DownloadLinkORM
from tweet_video_api.storage.sql_store import SQLStore
from tweet_video_api.tests.samples import STATUS_URL, make_extraction


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """SQLite store on a temporary file, so concurrent sessions use separate connections."""
    store = SQLStore(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await store.init()
    yield store
    await store.close()


def make_record(device: str, origin: str = "1.1.1.1") -> RequestRecordDTO:
    return RequestRecordDTO(
        origin_address=origin,
        client_agent_string="agent",
        device_class=device,
        browser_class="Unknown",
        platform_class="Unknown",
        target_url=STATUS_URL,
        endpoint_name="/api/download",
    )


@pytest.mark.asyncio
async def test_backend_name_and_ping(sql_store):
    assert sql_store.backend_name == "sqlite"
    assert await sql_store.ping()


@pytest.mark.asyncio
async def test_init_is_idempotent(sql_store):
    await sql_store.init()
    assert (await sql_store.get_counters()).total_requests == 0


@pytest.mark.asyncio
async def test_upsert_creates_then_increments(sql_store):
    first = await sql_store.upsert_item("20", make_extraction(author="First", links=2))
    second = await sql_store.upsert_item("20", make_extraction(author="Second", links=2))

    assert first.created and not second.created
    assert first.item.total_fetches == 1
    assert second.item.total_fetches == 2
    assert second.item.author == "First"
    assert (await sql_store.get_counters()).total_videos == 1
    assert await sql_store.count_items() == 1


@pytest.mark.asyncio
async def test_repeated_link_urls_are_stored_once(sql_store):
    extraction = make_extraction(links=1)
    extraction.download_links.append(
        DownloadCandidate(url=extraction.download_links[0].url, quality="sd", resolution="640x360")
    )

    result = await sql_store.upsert_item("20", extraction)

    assert result.created
    async with sql_store._engine.connect() as conn:
        rows = (await conn.execute(select(DownloadLinkORM.quality, DownloadLinkORM.fetch_count))).all()
    assert [(row.quality, row.fetch_count) for row in rows] == [("hd", 1)]


@pytest.mark.asyncio
async def test_concurrent_upserts_lose_no_increments(sql_store):
    results = await asyncio.gather(*(sql_store.upsert_item("20", make_extraction()) for _ in range(10)))

    assert sum(result.created for result in results) == 1
    [item] = await sql_store.list_items()
    assert item.total_fetches == 10
    assert (await sql_store.get_counters()).total_videos == 1


@pytest.mark.asyncio
async def test_list_top_orders_by_fetches_then_insertion(sql_store):
    for external_id, fetches in [("a", 1), ("b", 2), ("c", 2)]:
        for _ in range(fetches):
            await sql_store.upsert_item(external_id, make_extraction())

    top = await sql_store.list_top(2)
    assert [item.external_id for item in top] == ["b", "c"]


@pytest.mark.asyncio
async def test_request_log_and_histogram(sql_store):
    for device in ["Mobile", "Mobile", "Desktop"]:
        await sql_store.insert_request(make_record(device))

    assert await sql_store.count_requests() == 3
    assert await sql_store.device_histogram() == {"Mobile": 2, "Desktop": 1}
    assert len(await sql_store.list_recent(2)) == 2

    assert await sql_store.purge_requests() == 3
    assert await sql_store.count_requests() == 0


@pytest.mark.asyncio
async def test_purge_items_zeroes_video_counter(sql_store):
    await sql_store.upsert_item("1", make_extraction(links=1))
    await sql_store.upsert_item("2", make_extraction(links=1))

    assert await sql_store.purge_items() == 2
    assert await sql_store.count_items() == 0
    assert (await sql_store.get_counters()).total_videos == 0


@pytest.mark.asyncio
async def test_counters(sql_store):
    await sql_store.increment_counter("total_requests")
    await sql_store.increment_counter("total_requests")
    assert (await sql_store.get_counters()).total_requests == 2

    await sql_store.reset_counters()
    counters = await sql_store.get_counters()
    assert counters.total_requests == 0
    assert counters.total_videos == 0

    with pytest.raises(ValueError):
        await sql_store.increment_counter("nope")


@pytest.mark.asyncio
async def test_ban_lifecycle(sql_store):
    assert await sql_store.ban("1.2.3.4")
    assert not await sql_store.ban("1.2.3.4")
    assert await sql_store.is_banned("1.2.3.4")
    assert [entry.address for entry in await sql_store.list_bans()] == ["1.2.3.4"]

    assert await sql_store.unban("1.2.3.4")
    assert not await sql_store.is_banned("1.2.3.4")


@pytest.mark.asyncio
async def test_database_errors_surface_as_store_error(tmp_path):
    store = SQLStore(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    try:
        # No init(): the tables do not exist.
        with pytest.raises(StoreError):
            await store.count_items()
    finally:
        await store.close()
