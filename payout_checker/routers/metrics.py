"""Prometheus metrics endpoint for the payout checker."""

from fastapi import APIRouter, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

router = APIRouter()

# Request metrics
REQUEST_COUNT = Counter(
    "payout_checker_requests_total",
    "Total number of requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = Histogram(
    "payout_checker_request_latency_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# Eligibility metrics
EVALUATIONS_TOTAL = Counter(
    "payout_checker_evaluations_total",
    "Payout eligibility evaluations",
    ["result"],  # eligible, ineligible
)

RULE_FAILURES_TOTAL = Counter(
    "payout_checker_rule_failures_total",
    "Failed rule checks by rule",
    ["rule"],
)

# Analytics metrics
TRACK_EVENTS_TOTAL = Counter(
    "payout_checker_track_events_total",
    "Analytics events by outcome",
    ["outcome"],  # recorded, ignored, rejected
)

PRESENT_VISITORS = Gauge(
    "payout_checker_present_visitors",
    "Visitors with a live ping heartbeat",
)

# Trade import metrics
TRADE_IMPORTS_TOTAL = Counter(
    "payout_checker_trade_imports_total",
    "TradesViz import relay runs by final state",
    ["state"],
)


def record_request(method: str, endpoint: str, status_code: int, duration: float):
    """Record request metrics."""
    REQUEST_COUNT.labels(
        method=method, endpoint=endpoint, status_code=status_code
    ).inc()
    REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(duration)


def record_evaluation(eligible: bool, failed_rules: list[str]):
    """Record an eligibility evaluation and which rules failed."""
    EVALUATIONS_TOTAL.labels(result="eligible" if eligible else "ineligible").inc()
    for rule in failed_rules:
        RULE_FAILURES_TOTAL.labels(rule=rule).inc()


def record_track_event(outcome: str):
    TRACK_EVENTS_TOTAL.labels(outcome=outcome).inc()


def set_present_visitors(count: int):
    PRESENT_VISITORS.set(count)


def record_trade_import(state: str):
    TRADE_IMPORTS_TOTAL.labels(state=state).inc()


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    This endpoint is excluded from OpenAPI docs.
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
