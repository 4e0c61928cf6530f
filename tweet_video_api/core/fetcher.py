"""
Fetcher for the twitsave.com info page.

Issues a single GET per inbound request with a randomized browser-like
identification header. Failures are raised as ``UpstreamError`` and are
never retried here.
"""

import logging
import random
from typing import Dict, Optional, Sequence
from urllib.parse import quote

import httpx

from tweet_video_api.core.errors import UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://twitsave.com"

USER_AGENTS: Sequence[str] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:120.0) Gecko/20100101 Firefox/120.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) "
    "Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/118.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/119.0.0.0 Safari/537.36 Edg/119.0.0.0",
)

UPSTREAM_STATUS_MESSAGES: Dict[int, str] = {
    404: "Tweet not found or Twitsave service unavailable",
    403: "Access denied by Twitsave",
    429: "Rate limited by Twitsave. Please try again later.",
}


def build_headers(rng: Optional[random.Random] = None) -> Dict[str, str]:
    """Browser-like request headers with a randomly chosen User-Agent."""
    chooser = rng or random
    return {
        "User-Agent": chooser.choice(USER_AGENTS),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Upgrade-Insecure-Requests": "1",
    }


class TwitsaveFetcher:
    """
    Async client for the upstream info page.

    The underlying ``httpx.AsyncClient`` is owned by the fetcher unless one
    is passed in, in which case the caller is responsible for closing it.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            base_url: Scheme and host of the upstream site, without trailing slash.
            timeout: Total request timeout in seconds.
            client: Optional pre-built HTTP client (used by tests with a mock transport).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True)

    def build_target_url(self, source_url: str) -> str:
        return f"{self.base_url}/info?url={quote(source_url, safe='')}"

    async def fetch(self, source_url: str) -> str:
        """
        Fetch the info page for a source URL.

        Args:
            source_url: The status URL supplied by the client.

        Returns:
            str: Raw HTML of the info page.

        Raises:
            UpstreamError: On timeout (504), connection failure (502) or non-2xx status (502).
        """
        target_url = self.build_target_url(source_url)
        logger.info(f"Fetching from Twitsave for URL: {source_url}")
        try:
            response = await self.client.get(target_url, headers=build_headers(), timeout=self.timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Twitsave request timed out for {source_url}: {e}")
            raise UpstreamError("Request timeout", status_code=504, reason="timeout") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = UPSTREAM_STATUS_MESSAGES.get(status, f"Twitsave returned HTTP {status}")
            logger.warning(f"Twitsave answered {status} for {source_url}")
            raise UpstreamError(message, status_code=502, upstream_status=status, reason="status") from e
        except httpx.RequestError as e:
            logger.warning(f"Cannot reach Twitsave for {source_url}: {e}")
            raise UpstreamError("Cannot connect to Twitsave service", status_code=502, reason="connect") from e
        return response.text

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
            logger.info("Twitsave fetcher closed")
