"""
SQLAlchemy-based storage backend for SQLite and PostgreSQL.

The item upsert is a single ``INSERT ... ON CONFLICT DO UPDATE`` statement,
so concurrent requests for the same status cannot lose increments.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from tweet_video_api.core.errors import StoreError
from tweet_video_api.models import (
    BanEntryORM,
    Base,
    COUNTERS_ROW_ID,
    CountersORM,
    DownloadLinkORM,
    RequestRecordORM,
    VideoORM,
)
from tweet_video_api.models.dtos import (
    BanEntryDTO,
    CountersDTO,
    ExternalItemDTO,
    ExtractionResult,
    RequestRecordDTO,
    UpsertResult,
    utcnow,
)
from tweet_video_api.storage.base_store import check_counter_name
from tweet_video_api.utils.db_health import check_db_connection
from tweet_video_api.utils.db_session import create_session_factory, create_store_engine, session_scope

logger = logging.getLogger(__name__)


class SQLStore:
    """Relational implementation of the VideoStore protocol."""

    def __init__(self, database_url: str, echo: bool = False, engine: Optional[AsyncEngine] = None):
        """
        Initialize the SQL store.

        Args:
            database_url: Async SQLAlchemy URL (``sqlite+aiosqlite://...`` or ``postgresql+asyncpg://...``).
            echo: Log emitted SQL.
            engine: Optional pre-built engine; the store disposes it on ``close``.
        """
        self.database_url = database_url
        self._engine = engine or create_store_engine(database_url, echo=echo)
        self._session_factory = create_session_factory(self._engine)
        self.dialect_name = self._engine.dialect.name
        self.backend_name = "sqlite" if self.dialect_name == "sqlite" else "postgresql"

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        try:
            async with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as e:
            logger.error(f"Database error during {operation}: {e}", exc_info=True)
            raise StoreError(f"Database error during {operation}") from e

    def _insert(self, table):
        if self.dialect_name == "sqlite":
            return sqlite.insert(table)
        return postgresql.insert(table)

    async def init(self) -> None:
        """
        Create missing tables and the counters row.

        PostgreSQL deployments are expected to run the Alembic migrations first;
        ``create_all`` only fills in what is missing.
        """
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            logger.error(f"Failed to initialize {self.backend_name} schema: {e}", exc_info=True)
            raise StoreError("Failed to initialize database schema") from e
        async with self._session("init") as session:
            await session.execute(
                self._insert(CountersORM.__table__)
                .values(id=COUNTERS_ROW_ID, total_requests=0, total_videos=0)
                .on_conflict_do_nothing(index_elements=["id"])
            )
        logger.info(f"{self.backend_name} store initialized")

    async def close(self) -> None:
        await self._engine.dispose()

    async def ping(self) -> bool:
        return await check_db_connection(self._engine)

    async def upsert_item(self, external_id: str, extraction: ExtractionResult) -> UpsertResult:
        now = utcnow()
        videos = VideoORM.__table__
        async with self._session("upsert_item") as session:
            stmt = self._insert(videos).values(
                external_id=external_id,
                author=extraction.tweet_info.author,
                text=extraction.tweet_info.text,
                published_label=extraction.tweet_info.date,
                thumbnail_url=extraction.thumbnail,
                total_fetches=1,
                first_seen=now,
                last_seen=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["external_id"],
                set_={"total_fetches": videos.c.total_fetches + 1, "last_seen": now},
            ).returning(*videos.c)
            row = (await session.execute(stmt)).mappings().one()
            created = row["total_fetches"] == 1

            # One row per url; a repeated conflict key in a single statement is rejected by Postgres.
            unique_links = {}
            for link in extraction.download_links:
                unique_links.setdefault(link.url, link)
            if unique_links:
                links = DownloadLinkORM.__table__
                link_stmt = self._insert(links).values([
                    {
                        "external_id": external_id,
                        "url": link.url,
                        "quality": link.quality,
                        "resolution": link.resolution,
                        "type": link.type,
                        "source": link.source,
                        "fetch_count": 1,
                    }
                    for link in unique_links.values()
                ])
                link_stmt = link_stmt.on_conflict_do_update(
                    index_elements=["external_id", "url"],
                    set_={"fetch_count": links.c.fetch_count + 1},
                )
                await session.execute(link_stmt)

            if created:
                await session.execute(
                    update(CountersORM)
                    .where(CountersORM.id == COUNTERS_ROW_ID)
                    .values(total_videos=CountersORM.total_videos + 1)
                )

        item = ExternalItemDTO.model_validate(dict(row))
        logger.info(f"Stored video {external_id} (total fetches: {item.total_fetches}, created: {created})")
        return UpsertResult(item=item, created=created)

    async def list_top(self, limit: int) -> List[ExternalItemDTO]:
        async with self._session("list_top") as session:
            result = await session.execute(
                select(VideoORM).order_by(VideoORM.total_fetches.desc(), VideoORM.id.asc()).limit(limit)
            )
            return [ExternalItemDTO.model_validate(row) for row in result.scalars().all()]

    async def list_items(self) -> List[ExternalItemDTO]:
        async with self._session("list_items") as session:
            result = await session.execute(select(VideoORM).order_by(VideoORM.id.asc()))
            return [ExternalItemDTO.model_validate(row) for row in result.scalars().all()]

    async def count_items(self) -> int:
        async with self._session("count_items") as session:
            return (await session.execute(select(func.count()).select_from(VideoORM))).scalar_one()

    async def purge_items(self) -> int:
        async with self._session("purge_items") as session:
            await session.execute(delete(DownloadLinkORM))
            result = await session.execute(delete(VideoORM))
            await session.execute(
                update(CountersORM).where(CountersORM.id == COUNTERS_ROW_ID).values(total_videos=0)
            )
            removed = result.rowcount or 0
        logger.info(f"Purged {removed} videos")
        return removed

    async def insert_request(self, record: RequestRecordDTO) -> None:
        async with self._session("insert_request") as session:
            session.add(RequestRecordORM(**record.model_dump()))

    async def list_recent(self, limit: int) -> List[RequestRecordDTO]:
        async with self._session("list_recent") as session:
            result = await session.execute(
                select(RequestRecordORM)
                .order_by(RequestRecordORM.timestamp.desc(), RequestRecordORM.id.desc())
                .limit(limit)
            )
            return [RequestRecordDTO.model_validate(row) for row in result.scalars().all()]

    async def count_requests(self) -> int:
        async with self._session("count_requests") as session:
            return (await session.execute(select(func.count()).select_from(RequestRecordORM))).scalar_one()

    async def device_histogram(self) -> Dict[str, int]:
        async with self._session("device_histogram") as session:
            result = await session.execute(
                select(RequestRecordORM.device_class, func.count())
                .group_by(RequestRecordORM.device_class)
            )
            return {device: count for device, count in result.all()}

    async def purge_requests(self) -> int:
        async with self._session("purge_requests") as session:
            result = await session.execute(delete(RequestRecordORM))
            removed = result.rowcount or 0
        logger.info(f"Purged {removed} request records")
        return removed

    async def is_banned(self, address: str) -> bool:
        async with self._session("is_banned") as session:
            result = await session.execute(
                select(BanEntryORM.address).where(BanEntryORM.address == address).limit(1)
            )
            return result.first() is not None

    async def ban(self, address: str) -> bool:
        async with self._session("ban") as session:
            result = await session.execute(
                self._insert(BanEntryORM.__table__)
                .values(address=address, created_at=utcnow())
                .on_conflict_do_nothing(index_elements=["address"])
            )
            added = (result.rowcount or 0) > 0
        logger.info(f"Ban requested for {address} (new entry: {added})")
        return added

    async def unban(self, address: str) -> bool:
        async with self._session("unban") as session:
            result = await session.execute(delete(BanEntryORM).where(BanEntryORM.address == address))
            return (result.rowcount or 0) > 0

    async def list_bans(self) -> List[BanEntryDTO]:
        async with self._session("list_bans") as session:
            result = await session.execute(select(BanEntryORM).order_by(BanEntryORM.created_at.asc()))
            return [BanEntryDTO.model_validate(row) for row in result.scalars().all()]

    async def get_counters(self) -> CountersDTO:
        async with self._session("get_counters") as session:
            counters = await session.get(CountersORM, COUNTERS_ROW_ID)
            if counters is None:
                return CountersDTO()
            return CountersDTO.model_validate(counters)

    async def increment_counter(self, name: str) -> None:
        column = getattr(CountersORM, check_counter_name(name))
        async with self._session("increment_counter") as session:
            await session.execute(
                update(CountersORM).where(CountersORM.id == COUNTERS_ROW_ID).values({column: column + 1})
            )

    async def reset_counters(self) -> None:
        async with self._session("reset_counters") as session:
            await session.execute(
                update(CountersORM)
                .where(CountersORM.id == COUNTERS_ROW_ID)
                .values(total_requests=0, total_videos=0)
            )
        logger.info("Counters reset")
