"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service Configuration
    service_host: str = Field(default="0.0.0.0", description="Service host")
    service_port: int = Field(default=8000, description="Service port")
    log_level: str = Field(default="INFO", description="Logging level")
    docs_enabled: bool = Field(
        default=True, description="Expose /docs, /redoc and /openapi.json"
    )
    git_sha: Optional[str] = Field(default=None, description="Build git SHA")

    # Analytics
    primary_host: str = Field(
        default="apexpayoutchecker.vercel.app",
        description="Only requests with this Host header are tracked",
    )
    admin_token: Optional[str] = Field(
        default=None,
        description="Shared secret for /api/admin-stats (X-Admin-Token header)",
    )
    analytics_event_buffer_size: int = Field(
        default=100, ge=1, description="Rolling buffer of recent analytics events"
    )
    analytics_active_window_ms: int = Field(
        default=25_000, ge=0, description="Session counts as active within this window"
    )
    presence_idle_timeout_ms: int = Field(
        default=20_000, ge=0, description="Ping presence expires after this idle time"
    )
    analytics_max_sessions: int = Field(
        default=10_000, ge=1, description="Session records kept in memory (oldest dropped first)"
    )
    admin_recent_sessions: int = Field(
        default=20, ge=0, description="Sessions returned by admin stats"
    )
    admin_recent_events: int = Field(
        default=30, ge=0, description="Events returned by admin stats"
    )

    # TradesViz trade import
    tradesviz_api_key: Optional[str] = Field(
        default=None, description="TradesViz API token (upload relay disabled if unset)"
    )
    tradesviz_base_url: str = Field(
        default="https://api.tradesviz.com", description="TradesViz API base URL"
    )
    tradesviz_timeout: float = Field(
        default=30.0, gt=0, description="TradesViz request timeout in seconds"
    )
    tradesviz_max_polls: int = Field(
        default=15, ge=1, description="Status polls before the import times out"
    )
    tradesviz_poll_interval_s: float = Field(
        default=1.5, ge=0, description="Delay before each status poll"
    )
    upload_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Maximum trade CSV upload size"
    )

    # Request limits
    max_request_body_size: int = Field(
        default=12 * 1024 * 1024, description="Maximum request body size in bytes"
    )
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    rate_limit_requests_per_minute: int = Field(
        default=120, description="Requests per minute per IP"
    )
    cors_origins: str = Field(
        default="*", description="Comma-separated CORS allowlist ('*' allows all)"
    )

    # Sentry
    sentry_dsn: Optional[str] = Field(
        default=None, description="Sentry DSN (error tracking disabled if unset)"
    )
    sentry_environment: str = Field(
        default="development",
        description="Sentry environment tag (development, staging, production)"
    )
    sentry_traces_sample_rate: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Sentry performance tracing sample rate (0.0-1.0)"
    )

    @property
    def tradesviz_enabled(self) -> bool:
        """Whether the trade import relay can run."""
        return bool(self.tradesviz_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
