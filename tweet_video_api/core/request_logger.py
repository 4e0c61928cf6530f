"""
Request Logger component.

Records one RequestRecord per inbound API call. Logging is best effort: a
failing store never fails the calling request. The outcome is returned
explicitly instead of being raised.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from tweet_video_api.core.client_info import classify_client
from tweet_video_api.models.dtos import RequestRecordDTO
from tweet_video_api.storage.base_store import VideoStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogOutcome:
    """Non-fatal result of a best-effort logging call."""
    ok: bool
    error: Optional[str] = None


class RequestLogger:
    def __init__(self, store: VideoStore):
        self.store = store

    async def record(
        self,
        origin: str,
        agent_string: Optional[str],
        target_url: str,
        endpoint_name: str,
    ) -> LogOutcome:
        """
        Classify the client and append a request record.

        Args:
            origin: Resolved origin address of the caller.
            agent_string: Raw ``User-Agent`` header.
            target_url: URL the caller asked about.
            endpoint_name: Path of the endpoint that was called.

        Returns:
            LogOutcome: ok=False with the error text when the store rejected the record.
        """
        client = classify_client(agent_string)
        record = RequestRecordDTO(
            origin_address=origin,
            client_agent_string=agent_string or "Unknown",
            device_class=client.device_class,
            browser_class=client.browser_class,
            platform_class=client.platform_class,
            target_url=target_url,
            endpoint_name=endpoint_name,
        )
        try:
            await self.store.insert_request(record)
        except Exception as e:
            logger.warning(f"Error logging request for {origin} on {endpoint_name}: {e}")
            return LogOutcome(ok=False, error=str(e))
        return LogOutcome(ok=True)
