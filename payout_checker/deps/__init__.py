"""FastAPI dependencies for auth, rate limiting, and shared services."""

from payout_checker.deps.security import (
    RateLimiter,
    get_rate_limiter,
    is_primary_host,
    request_ip,
    require_admin_token,
    require_primary_host,
)
from payout_checker.deps.services import get_analytics_store, get_import_relay

__all__ = [
    "RateLimiter",
    "get_analytics_store",
    "get_import_relay",
    "get_rate_limiter",
    "is_primary_host",
    "request_ip",
    "require_admin_token",
    "require_primary_host",
]
