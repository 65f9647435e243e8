"""Pydantic models for request/response validation.

This package re-exports all schemas so routes can import from
`payout_checker.schemas` directly.
"""

# ===========================================
# Common: Health, Error
# ===========================================
from payout_checker.schemas.common import ErrorResponse, HealthResponse

# ===========================================
# Eligibility
# ===========================================
from payout_checker.schemas.eligibility import (
    AccountListResponse,
    AccountProfileOut,
    ComputedOut,
    EligibilityRequest,
    EligibilityResponse,
    PayoutRangeOut,
    RuleCheckOut,
)

# ===========================================
# Analytics
# ===========================================
from payout_checker.schemas.analytics import (
    AdminStatsResponse,
    EventOut,
    LogIpResponse,
    PingResponse,
    SessionOut,
    StatsBreakdowns,
    StatsTotals,
    TrackEventRequest,
)

# ===========================================
# Trade import
# ===========================================
from payout_checker.schemas.trade_import import (
    TradeImportErrorResponse,
    TradeImportResponse,
)

__all__ = [
    "AccountListResponse",
    "AccountProfileOut",
    "AdminStatsResponse",
    "ComputedOut",
    "EligibilityRequest",
    "EligibilityResponse",
    "ErrorResponse",
    "EventOut",
    "HealthResponse",
    "LogIpResponse",
    "PayoutRangeOut",
    "PingResponse",
    "RuleCheckOut",
    "SessionOut",
    "StatsBreakdowns",
    "StatsTotals",
    "TrackEventRequest",
    "TradeImportErrorResponse",
    "TradeImportResponse",
]
