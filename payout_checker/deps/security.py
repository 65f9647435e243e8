"""Security dependencies for FastAPI routes.

Provides:
- Primary-host gate (analytics only count the production domain)
- Admin token authentication (constant-time compare)
- Rate limiting (in-process sliding window)
"""

import asyncio
import hmac
import time
from collections import defaultdict
from typing import Callable, Optional

import structlog
from fastapi import Depends, HTTPException, Request, status

from payout_checker.config import Settings, get_settings
from payout_checker.services.analytics import client_ip

logger = structlog.get_logger(__name__)


# =============================================================================
# Host / Admin Token
# =============================================================================


def is_primary_host(request: Request, settings: Settings) -> bool:
    return request.headers.get("host", "") == settings.primary_host


def require_primary_host(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> bool:
    """Reject requests that did not arrive on the production domain."""
    if not is_primary_host(request, settings):
        logger.warning(
            "Request from non-primary host rejected",
            path=request.url.path,
            host=request.headers.get("host", ""),
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return True


def require_admin_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> bool:
    """
    Require the shared admin token when one is configured.

    Security guarantees:
    - Uses hmac.compare_digest() for constant-time comparison
    - Returns 401 for missing token, 403 for invalid token
    - No token configured means the primary-host gate is the only check

    Usage:
        @router.get("/api/admin-stats")
        async def stats(..., _: bool = Depends(require_admin_token)):
            ...
    """
    admin_token = settings.admin_token
    if not admin_token:
        return True

    # Get token from header (preferred) or query param (fallback)
    provided_token = request.headers.get("X-Admin-Token")
    if not provided_token:
        provided_token = request.query_params.get("token")

    if not provided_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin token required. Provide X-Admin-Token header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not hmac.compare_digest(provided_token.encode(), admin_token.encode()):
        logger.warning(
            "Invalid admin token attempt",
            path=request.url.path,
            client=request.client.host if request.client else "unknown",
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin token",
        )

    return True


def request_ip(request: Request) -> str:
    """Client IP, honoring X-Forwarded-For from the edge proxy."""
    peer = request.client.host if request.client else None
    return client_ip(request.headers, peer)


# =============================================================================
# Rate Limiting (In-Process)
# =============================================================================


class RateLimiter:
    """
    In-process rate limiter using sliding window.

    Note: This is per-process only, which matches the in-memory analytics.

    Usage:
        limiter = RateLimiter()

        @router.post("/upload")
        async def upload(
            request: Request,
            _: None = Depends(limiter.check("upload", 5)),  # 5/min
        ):
            ...
    """

    def __init__(self, clock: Callable[[], float] = time.time, max_keys: int = 10_000):
        # key -> list of request timestamps
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._lock = asyncio.Lock()
        self._clock = clock
        self._max_keys = max_keys

    def _cleanup_old(self, key: str, window_seconds: float = 60.0) -> None:
        """Remove requests older than window."""
        cutoff = self._clock() - window_seconds
        self._requests[key] = [t for t in self._requests[key] if t > cutoff]

    def _prune_idle(self, window_seconds: float = 60.0) -> None:
        """Drop keys with no requests inside the window."""
        cutoff = self._clock() - window_seconds
        idle = [
            key
            for key, times in self._requests.items()
            if not times or max(times) <= cutoff
        ]
        for key in idle:
            del self._requests[key]

    def check(
        self,
        limit_name: str,
        requests_per_minute: int,
        key_func: Optional[Callable[[Request], str]] = None,
    ):
        """
        Create a dependency that checks rate limit.

        Args:
            limit_name: Name for this limit (for logging)
            requests_per_minute: Max requests allowed per minute
            key_func: Function(request) -> str for rate limit key.
                      Default: client IP address.
        """

        async def rate_limit_dependency(request: Request):
            if key_func:
                key = f"{limit_name}:{key_func(request)}"
            else:
                key = f"{limit_name}:ip:{request_ip(request)}"

            async with self._lock:
                if len(self._requests) >= self._max_keys:
                    self._prune_idle()
                self._cleanup_old(key)
                now = self._clock()

                if len(self._requests[key]) >= requests_per_minute:
                    oldest = min(self._requests[key])
                    retry_after = int(60 - (now - oldest)) + 1

                    logger.warning(
                        "Rate limit exceeded",
                        limit_name=limit_name,
                        key=key,
                        requests=len(self._requests[key]),
                        limit=requests_per_minute,
                    )

                    raise HTTPException(
                        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                        detail=f"Rate limit exceeded: {requests_per_minute}/min for {limit_name}",
                        headers={"Retry-After": str(retry_after)},
                    )

                self._requests[key].append(now)

        return rate_limit_dependency


# Global rate limiter instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get global rate limiter instance."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter
