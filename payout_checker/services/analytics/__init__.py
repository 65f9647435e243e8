"""Visitor analytics: in-memory store and client heuristics."""

from payout_checker.services.analytics.classify import (
    ClientType,
    browser_for,
    classify_client,
    client_ip,
    device_for,
    hash_ip,
    is_browser,
)
from payout_checker.services.analytics.store import (
    AnalyticsEvent,
    AnalyticsStore,
    AnalyticsSummary,
    EndedVisit,
    SessionRecord,
)

__all__ = [
    "AnalyticsEvent",
    "AnalyticsStore",
    "AnalyticsSummary",
    "ClientType",
    "EndedVisit",
    "SessionRecord",
    "browser_for",
    "classify_client",
    "client_ip",
    "device_for",
    "hash_ip",
    "is_browser",
]
