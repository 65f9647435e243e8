"""Common schemas: health checks and error responses."""

from typing import Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for health endpoint."""

    status: str = Field(..., description="Overall service status")
    version: str = Field(..., description="Service version")
    git_sha: Optional[str] = Field(None, description="Build git SHA")
    trade_import_enabled: bool = Field(
        ..., description="True if the TradesViz relay is configured"
    )
    tracked_sessions: int = Field(..., description="Analytics sessions held in memory")
    present_visitors: int = Field(..., description="Visitors with a live ping heartbeat")


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    retryable: bool = Field(default=False, description="Whether error is retryable")
