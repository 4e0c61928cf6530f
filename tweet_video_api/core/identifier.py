"""Resolution of the stable external identifier for a status URL."""

import re
from typing import Optional

STATUS_ID_PATTERN = re.compile(r"status/(\d+)")
SUPPORTED_HOST_MARKERS = ("twitter.com/", "x.com/")


def resolve_id(source_url: str) -> Optional[str]:
    """
    Extract the status identifier from a source URL.

    Only the first digit run after a ``status/`` marker counts.

    Args:
        source_url: URL as supplied by the client.

    Returns:
        Optional[str]: The identifier, or None when the URL has no ``status/<digits>`` part.
    """
    if not source_url:
        return None
    match = STATUS_ID_PATTERN.search(source_url)
    return match.group(1) if match else None


def is_supported_url(source_url: str) -> bool:
    """True when the URL points at twitter.com or x.com."""
    return any(marker in source_url for marker in SUPPORTED_HOST_MARKERS)
