"""Middleware configuration for the FastAPI application."""

import time
import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from payout_checker import __version__
from payout_checker.config import Settings
from payout_checker.routers import metrics

logger = structlog.get_logger(__name__)

# Tracker beacons, presence pings and health checks: high volume, logged at debug
BEACON_PATHS = frozenset({"/api/ping", "/api/track", "/metrics", "/health"})

# The checker page only loads its own inline styles; nothing may frame it
PAGE_CSP = (
    "default-src 'self'; style-src 'self' 'unsafe-inline'; "
    "img-src 'self' data:; frame-ancestors 'none'; form-action 'self'"
)

STATIC_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def setup_rate_limiter(app: FastAPI, settings: Settings) -> Limiter:
    """Set up the default per-IP rate limit and attach it to the app."""
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.rate_limit_requests_per_minute}/minute"],
        enabled=settings.rate_limit_enabled,
    )
    app.state.limiter = limiter
    # mypy: slowapi handler signature differs from FastAPI expected type
    app.add_exception_handler(
        RateLimitExceeded, _rate_limit_exceeded_handler  # type: ignore[arg-type]
    )
    app.add_middleware(SlowAPIMiddleware)
    return limiter


def parse_cors_origins(raw: str) -> list[str]:
    """'*' allows every origin; otherwise a comma-separated allowlist."""
    if raw.strip() == "*":
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Configure CORS for the tracker script and the checker page."""
    cors_origins = parse_cors_origins(settings.cors_origins)
    if cors_origins == ["*"]:
        logger.warning(
            "CORS_ORIGINS not set, allowing all origins",
            primary_host=settings.primary_host,
        )
    else:
        logger.info("CORS origins configured", origins=cors_origins)

    # Beacons are sent without credentials; only an explicit allowlist gets them
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_origins != ["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Admin-Token", "X-Request-ID"],
    )


async def security_headers_middleware(request: Request, call_next):
    """Security headers for every response, plus CSP and no-store where it matters."""
    response = await call_next(request)

    response.headers.update(STATIC_SECURITY_HEADERS)

    content_type = response.headers.get("content-type", "")
    if content_type.startswith("text/html"):
        response.headers["Content-Security-Policy"] = PAGE_CSP

    # Verdicts, admin stats and imported trades are per-request data
    if request.url.path.startswith("/api/"):
        response.headers["Cache-Control"] = "no-store"

    if request.headers.get("X-Forwarded-Proto") == "https":
        response.headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )

    return response


def _route_label(request: Request) -> str:
    """Route template when the router recorded one, else the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def _error_response(status_code: int, detail: str, retryable: bool, request_id: str):
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "retryable": retryable},
        headers={"X-Request-ID": request_id, "X-API-Version": __version__},
    )


def create_request_middleware(settings: Settings):
    """Create request middleware with settings closure."""
    max_mb = settings.max_request_body_size // (1024 * 1024)

    async def request_middleware(request: Request, call_next):
        """Request id, body size limit, timing, metrics and access log."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        path = request.url.path
        is_beacon = path in BEACON_PATHS

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=path,
        )

        content_length = request.headers.get("content-length", "")
        if content_length.isdigit() and int(content_length) > settings.max_request_body_size:
            logger.warning(
                "Request body too large",
                content_length=int(content_length),
                max_size=settings.max_request_body_size,
            )
            return _error_response(
                413,
                f"Request body too large. Maximum size is {max_mb}MB",
                retryable=False,
                request_id=request_id,
            )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("Request failed", error=str(e))
            return _error_response(
                500, "Internal server error", retryable=True, request_id=request_id
            )
        duration_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
        response.headers["X-API-Version"] = __version__

        if path != "/metrics":
            metrics.record_request(
                method=request.method,
                endpoint=_route_label(request),
                status_code=response.status_code,
                duration=duration_ms / 1000,
            )

        log = logger.debug if is_beacon and response.status_code < 500 else logger.info
        log(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        return response

    return request_middleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Set up all middleware for the application."""
    setup_rate_limiter(app, settings)
    setup_cors(app, settings)

    # Registered last, so it runs first and wraps everything above
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(create_request_middleware(settings))
