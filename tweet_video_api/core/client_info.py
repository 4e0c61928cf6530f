"""Client classification from request headers."""

from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

# Ordered (substring, label) checks; the first match wins. Chrome agents also
# contain "Safari", so Chrome must be tested first.
BROWSER_RULES: Sequence[Tuple[str, str]] = (
    ("Chrome", "Chrome"),
    ("Firefox", "Firefox"),
    ("Safari", "Safari"),
    ("Edge", "Edge"),
)

PLATFORM_RULES: Sequence[Tuple[str, str]] = (
    ("Windows", "Windows"),
    ("Mac", "Mac"),
    ("Linux", "Linux"),
    ("Android", "Android"),
    ("iPhone", "iOS"),
)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ClientClass:
    device_class: str
    browser_class: str
    platform_class: str


def _first_match(agent: str, rules: Sequence[Tuple[str, str]]) -> str:
    for needle, label in rules:
        if needle in agent:
            return label
    return UNKNOWN


def classify_device(agent: str) -> str:
    if "Mobile" in agent:
        return "Mobile"
    if "Tablet" in agent:
        return "Tablet"
    return "Desktop"


def classify_client(agent: Optional[str]) -> ClientClass:
    """
    Classify a user-agent string into device, browser and platform classes.

    Args:
        agent: Raw ``User-Agent`` header value; None is treated as "Unknown".

    Returns:
        ClientClass: The three classifications.
    """
    agent = agent or UNKNOWN
    return ClientClass(
        device_class=classify_device(agent),
        browser_class=_first_match(agent, BROWSER_RULES),
        platform_class=_first_match(agent, PLATFORM_RULES),
    )


def resolve_origin(
    headers: Mapping[str, str],
    peer_host: Optional[str] = None,
    trust_proxy_headers: bool = True,
) -> str:
    """
    Resolve the origin address of a request.

    Order: first entry of ``X-Forwarded-For``, then ``X-Real-IP``, then the
    socket peer, else ``"unknown"``. Both headers are client-controlled unless
    a proxy rewrites them; with ``trust_proxy_headers=False`` only the peer counts.
    """
    if not trust_proxy_headers:
        return peer_host or "unknown"
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return peer_host or "unknown"
