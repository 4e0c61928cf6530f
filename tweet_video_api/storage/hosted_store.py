"""
Hosted storage backend speaking the PostgREST protocol (e.g. Supabase).

The schema and the ``upsert_item`` / ``increment_stat`` functions it relies
on live in ``hosted_schema.sql``.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

import httpx

from tweet_video_api.core.errors import StoreError
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

logger = logging.getLogger(__name__)


def _parse_content_range_total(header: Optional[str]) -> int:
    """Total from a ``Content-Range`` header such as ``0-9/57`` or ``*/0``."""
    if not header or "/" not in header:
        return 0
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else 0


class HostedStore:
    """PostgREST implementation of the VideoStore protocol."""

    backend_name = "hosted"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the hosted store client.

        Args:
            base_url: Project URL, e.g. ``https://<project>.supabase.co``.
            api_key: Service key, sent both as ``apikey`` and as a Bearer token.
            timeout: Request timeout in seconds.
            client: Optional pre-built HTTP client (tests pass one with a mock transport).
        """
        self.base_url = base_url.rstrip("/")
        self.rest_url = f"{self.base_url}/rest/v1"
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.client.headers.update(headers)

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> httpx.Response:
        headers = {"Prefer": prefer} if prefer else None
        try:
            response = await self.client.request(
                method, f"{self.rest_url}/{path}", params=params, json=json, headers=headers
            )
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            logger.error(f"Hosted store answered {e.response.status_code} during {operation}: {e.response.text[:200]}")
            raise StoreError(f"Hosted store error during {operation}") from e
        except httpx.HTTPError as e:
            logger.error(f"Hosted store unreachable during {operation}: {e}")
            raise StoreError(f"Hosted store unreachable during {operation}") from e

    async def _count(self, table: str, operation: str) -> int:
        response = await self._request(
            "GET", table, operation, params={"select": "*", "limit": "1"}, prefer="count=exact"
        )
        return _parse_content_range_total(response.headers.get("content-range"))

    async def init(self) -> None:
        logger.info(f"Using hosted store at {self.base_url}")

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def ping(self) -> bool:
        try:
            await self._request("GET", "stats", "ping", params={"select": "id", "limit": "1"})
            return True
        except StoreError:
            return False

    async def upsert_item(self, external_id: str, extraction: ExtractionResult) -> UpsertResult:
        response = await self._request(
            "POST",
            "rpc/upsert_item",
            "upsert_item",
            json={
                "p_external_id": external_id,
                "p_author": extraction.tweet_info.author,
                "p_text": extraction.tweet_info.text,
                "p_published_label": extraction.tweet_info.date,
                "p_thumbnail_url": extraction.thumbnail,
            },
        )
        payload = response.json()
        if isinstance(payload, list):
            payload = payload[0] if payload else {}
        try:
            item = ExternalItemDTO.model_validate(payload["item"])
            created = bool(payload["created"])
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError("Hosted store returned an unexpected upsert payload") from e
        return UpsertResult(item=item, created=created)

    async def list_top(self, limit: int) -> List[ExternalItemDTO]:
        response = await self._request(
            "GET", "videos", "list_top",
            params={"select": "*", "order": "total_fetches.desc,id.asc", "limit": str(limit)},
        )
        return [ExternalItemDTO.model_validate(row) for row in response.json()]

    async def list_items(self) -> List[ExternalItemDTO]:
        response = await self._request("GET", "videos", "list_items", params={"select": "*", "order": "id.asc"})
        return [ExternalItemDTO.model_validate(row) for row in response.json()]

    async def count_items(self) -> int:
        return await self._count("videos", "count_items")

    async def purge_items(self) -> int:
        # PostgREST refuses unfiltered deletes.
        response = await self._request(
            "DELETE", "videos", "purge_items", params={"id": "gt.0"}, prefer="count=exact"
        )
        await self._request("PATCH", "stats", "purge_items", params={"id": "eq.1"}, json={"total_videos": 0})
        return _parse_content_range_total(response.headers.get("content-range"))

    async def insert_request(self, record: RequestRecordDTO) -> None:
        await self._request(
            "POST", "requests", "insert_request",
            json=record.model_dump(mode="json"), prefer="return=minimal",
        )

    async def list_recent(self, limit: int) -> List[RequestRecordDTO]:
        response = await self._request(
            "GET", "requests", "list_recent",
            params={"select": "*", "order": "timestamp.desc,id.desc", "limit": str(limit)},
        )
        return [RequestRecordDTO.model_validate(row) for row in response.json()]

    async def count_requests(self) -> int:
        return await self._count("requests", "count_requests")

    async def device_histogram(self) -> Dict[str, int]:
        response = await self._request("GET", "requests", "device_histogram", params={"select": "device_class"})
        return dict(Counter(row["device_class"] for row in response.json()))

    async def purge_requests(self) -> int:
        response = await self._request(
            "DELETE", "requests", "purge_requests", params={"id": "gt.0"}, prefer="count=exact"
        )
        return _parse_content_range_total(response.headers.get("content-range"))

    async def is_banned(self, address: str) -> bool:
        response = await self._request(
            "GET", "bans", "is_banned", params={"select": "address", "address": f"eq.{address}", "limit": "1"}
        )
        return bool(response.json())

    async def ban(self, address: str) -> bool:
        response = await self._request(
            "POST", "bans", "ban",
            params={"on_conflict": "address"},
            json={"address": address, "created_at": utcnow().isoformat()},
            prefer="resolution=ignore-duplicates,return=representation",
        )
        return bool(response.json())

    async def unban(self, address: str) -> bool:
        response = await self._request(
            "DELETE", "bans", "unban", params={"address": f"eq.{address}"}, prefer="return=representation"
        )
        return bool(response.json())

    async def list_bans(self) -> List[BanEntryDTO]:
        response = await self._request("GET", "bans", "list_bans", params={"select": "*", "order": "created_at.asc"})
        return [BanEntryDTO.model_validate(row) for row in response.json()]

    async def get_counters(self) -> CountersDTO:
        response = await self._request(
            "GET", "stats", "get_counters", params={"select": "total_requests,total_videos", "id": "eq.1"}
        )
        rows = response.json()
        return CountersDTO.model_validate(rows[0]) if rows else CountersDTO()

    async def increment_counter(self, name: str) -> None:
        await self._request(
            "POST", "rpc/increment_stat", "increment_counter", json={"field_name": check_counter_name(name)}
        )

    async def reset_counters(self) -> None:
        await self._request(
            "PATCH", "stats", "reset_counters", params={"id": "eq.1"},
            json={"total_requests": 0, "total_videos": 0},
        )
