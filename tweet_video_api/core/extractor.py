"""
Extraction of metadata and download candidates from the twitsave.com info page.
"""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from tweet_video_api.models.dtos import DownloadCandidate, ExtractionResult, TweetInfo

logger = logging.getLogger(__name__)

DOWNLOAD_LINK_SELECTOR = 'a[href*="/download?file="]'
LABELED_RESOLUTION_PATTERN = re.compile(r"Resolution:\s*(\d+x\d+)", re.IGNORECASE)
RESOLUTION_PATTERN = re.compile(r"(\d+x\d+)")

HD_RESOLUTIONS = frozenset({"1688x720", "1280x720", "1920x1080"})
SD_RESOLUTIONS = frozenset({"844x360", "640x360"})
LOW_RESOLUTIONS = frozenset({"632x270", "480x270"})


def parse_resolution(label: str) -> str:
    """Return the ``WIDTHxHEIGHT`` token of a link label, or "unknown"."""
    match = LABELED_RESOLUTION_PATTERN.search(label) or RESOLUTION_PATTERN.search(label)
    return match.group(1) if match else "unknown"


def classify_quality(resolution: str) -> str:
    """Map a resolution to its quality tier; resolutions off the allow-list are "unknown"."""
    if resolution in HD_RESOLUTIONS:
        return "hd"
    if resolution in SD_RESOLUTIONS:
        return "sd"
    if resolution in LOW_RESOLUTIONS:
        return "low"
    return "unknown"


def _text_of(tag: Optional[Tag]) -> str:
    return tag.get_text(strip=True) if tag is not None else ""


def _attr_of(tag: Optional[Tag], name: str) -> Optional[str]:
    if tag is None:
        return None
    value = tag.get(name)
    return value or None


class TwitsaveExtractor:
    """Turns raw info-page HTML into an ``ExtractionResult``."""

    def __init__(self, base_url: str = "https://twitsave.com"):
        self.base_url = base_url.rstrip("/")

    def extract(self, html: str, source_url: str) -> ExtractionResult:
        """
        Parse the info page.

        Zero candidates is a valid result; the caller decides whether that is
        a "not found" condition.

        Args:
            html: Raw HTML returned by the fetcher.
            source_url: The status URL the page was requested for.

        Returns:
            ExtractionResult: Metadata, preview references and download candidates.
        """
        soup = BeautifulSoup(html or "", "html.parser")

        date_link = soup.select_one("a.text-xs")
        tweet_info = TweetInfo(
            author=_text_of(soup.select_one('a[href*="twitter.com"]')) or "Unknown",
            text=" ".join(_text_of(p) for p in soup.select("p.m-2")).strip(),
            date=_text_of(date_link),
            tweet_url=_attr_of(date_link, "href") or source_url,
        )

        video = soup.select_one("video")
        result = ExtractionResult(
            twitter_url=source_url,
            tweet_info=tweet_info,
            thumbnail=_attr_of(video, "poster"),
            video_preview=_attr_of(video, "src"),
        )

        for link in soup.select(DOWNLOAD_LINK_SELECTOR):
            href = link.get("href", "")
            label_tag = link.select_one(".truncate")
            label = _text_of(label_tag) if label_tag is not None else _text_of(link)
            resolution = parse_resolution(label)
            result.download_links.append(
                DownloadCandidate(
                    url=f"{self.base_url}{href}",
                    quality=classify_quality(resolution),
                    resolution=resolution,
                )
            )

        logger.debug(f"Extracted {result.total_videos_found} download links for {source_url}")
        return result
