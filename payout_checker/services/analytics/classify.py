"""User-agent and client IP heuristics for analytics."""

import hashlib
import re
from enum import Enum
from typing import Mapping, Optional


class ClientType(str, Enum):
    """Coarse classification of who is calling."""

    HUMAN = "HUMAN"
    VERCEL_EDGE = "VERCEL_EDGE"
    HEALTH_CHECK = "HEALTH_CHECK"
    OTHER = "OTHER"


BROWSER_MARKERS = ("Chrome", "Firefox", "Safari", "Edge", "Mobile", "Mozilla")
EDGE_MARKERS = ("Vercel", "node-fetch", "Next.js", "curl")
HEALTH_MARKERS = ("Health", "ELB", "Monitor", "Uptime")

_MOBILE_RE = re.compile(r"Mobile|Android|iPhone|iPad", re.IGNORECASE)


def client_ip(headers: Mapping[str, str], peer: Optional[str] = None) -> str:
    """First X-Forwarded-For hop, else the socket peer, else 'unknown'."""
    forwarded = headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    return first or peer or "unknown"


def hash_ip(ip: str) -> str:
    """Short, non-reversible IP fingerprint (first 8 hex chars of sha256)."""
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()[:8]


def is_browser(user_agent: str) -> bool:
    return any(marker in user_agent for marker in BROWSER_MARKERS)


def device_for(user_agent: str) -> str:
    if _MOBILE_RE.search(user_agent or ""):
        return "mobile"
    if not user_agent:
        return "unknown"
    return "desktop"


def browser_for(user_agent: str) -> str:
    """Browser family. Edge and Chrome both send 'Chrome', so Edge is checked first."""
    ua = user_agent or ""
    if re.search(r"Firefox", ua, re.IGNORECASE):
        return "Firefox"
    if re.search(r"Edg/", ua, re.IGNORECASE):
        return "Edge"
    if re.search(r"Chrome", ua, re.IGNORECASE):
        return "Chrome"
    if re.search(r"Safari", ua, re.IGNORECASE):
        return "Safari"
    if not ua:
        return "Unknown"
    return "Other"


def classify_client(user_agent: str) -> ClientType:
    """Browser beats edge/tooling, which beats health checkers."""
    ua = user_agent or ""
    if is_browser(ua):
        return ClientType.HUMAN
    if any(marker in ua for marker in EDGE_MARKERS):
        return ClientType.VERCEL_EDGE
    if any(marker in ua for marker in HEALTH_MARKERS):
        return ClientType.HEALTH_CHECK
    return ClientType.OTHER
