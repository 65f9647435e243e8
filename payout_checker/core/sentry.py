"""Sentry initialization and configuration."""

from typing import Any, Optional

import sentry_sdk
import structlog
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from payout_checker import __version__
from payout_checker.config import Settings
from payout_checker.core.middleware import BEACON_PATHS

logger = structlog.get_logger(__name__)

ADMIN_TOKEN_HEADER = "x-admin-token"
REDACTED = "[redacted]"


def _is_client_error(status_code: Any) -> bool:
    return isinstance(status_code, int) and 400 <= status_code < 500


def _scrub_admin_token(request: dict) -> None:
    """Admin stats accept the token as a header or a query param; keep both out."""
    headers = request.get("headers")
    if isinstance(headers, dict):
        for name in list(headers):
            if name.lower() == ADMIN_TOKEN_HEADER:
                headers[name] = REDACTED

    query = request.get("query_string")
    if isinstance(query, str) and "token=" in query:
        request["query_string"] = "&".join(
            f"token={REDACTED}" if part.startswith("token=") else part
            for part in query.split("&")
        )


def _before_send(event: dict, hint: dict) -> Optional[dict]:
    """
    Drop 4xx noise and strip admin credentials.

    Rejected uploads, 404 account sizes and 429s are user errors; only
    server failures reach Sentry.
    """
    exc_info = hint.get("exc_info")
    if exc_info and _is_client_error(getattr(exc_info[1], "status_code", None)):
        return None

    response = event.get("contexts", {}).get("response", {})
    if _is_client_error(response.get("status_code")):
        return None

    request = event.get("request")
    if isinstance(request, dict):
        _scrub_admin_token(request)

    return event


def _request_path(sampling_context: dict) -> str:
    scope = sampling_context.get("asgi_scope") or {}
    if scope.get("path"):
        return scope["path"]
    return sampling_context.get("transaction_context", {}).get("name", "")


def _create_traces_sampler(settings: Settings) -> Any:
    """Create a sampler that never traces beacons and follows the parent otherwise."""

    def traces_sampler(sampling_context: dict) -> float:
        if _request_path(sampling_context) in BEACON_PATHS:
            return 0.0

        parent = sampling_context.get("parent_sampled")
        if parent is not None:
            return float(parent)

        return settings.sentry_traces_sample_rate

    return traces_sampler


def init_sentry(settings: Settings) -> bool:
    """
    Initialize Sentry if DSN is configured.

    Returns True if Sentry was initialized, False otherwise.
    """
    if not settings.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_environment,
        release=settings.git_sha or f"payout-checker@{__version__}",
        integrations=[
            LoggingIntegration(level=None, event_level="ERROR"),
            StarletteIntegration(transaction_style="url"),
            FastApiIntegration(transaction_style="url"),
        ],
        traces_sampler=_create_traces_sampler(settings),
        send_default_pii=False,
        before_send=_before_send,
    )

    sentry_sdk.set_tag("service", "payout-checker")
    sentry_sdk.set_tag("primary_host", settings.primary_host)
    sentry_sdk.set_tag("trade_import_enabled", settings.tradesviz_enabled)

    logger.info(
        "Sentry initialized",
        environment=settings.sentry_environment,
        traces_sample_rate=settings.sentry_traces_sample_rate,
        trade_import_enabled=settings.tradesviz_enabled,
    )

    return True
