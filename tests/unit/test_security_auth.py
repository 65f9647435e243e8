"""Tests for host gate, admin token and rate limiting dependencies."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from payout_checker.config import Settings
from payout_checker.deps.security import (
    RateLimiter,
    request_ip,
    require_admin_token,
    require_primary_host,
)


def _request(headers=None, query=None, peer="10.0.0.1", path="/api/admin-stats"):
    request = MagicMock()
    request.headers = headers or {}
    request.query_params = query or {}
    request.client.host = peer
    request.url.path = path
    return request


class TestRequirePrimaryHost:
    def test_primary_host_allowed(self):
        settings = Settings(primary_host="payouts.example.com")
        request = _request({"host": "payouts.example.com"})

        assert require_primary_host(request, settings) is True

    def test_preview_host_forbidden(self):
        settings = Settings(primary_host="payouts.example.com")
        request = _request({"host": "payouts-git-main.example.app"})

        with pytest.raises(HTTPException) as exc_info:
            require_primary_host(request, settings)

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Forbidden"


class TestRequireAdminToken:
    def test_no_token_configured_allows(self):
        assert require_admin_token(_request(), Settings(admin_token=None)) is True

    def test_missing_token_returns_401(self):
        with pytest.raises(HTTPException) as exc_info:
            require_admin_token(_request(), Settings(admin_token="s3cret"))

        assert exc_info.value.status_code == 401

    def test_wrong_token_returns_403(self):
        request = _request({"X-Admin-Token": "guess"})

        with pytest.raises(HTTPException) as exc_info:
            require_admin_token(request, Settings(admin_token="s3cret"))

        assert exc_info.value.status_code == 403

    def test_header_token_accepted(self):
        request = _request({"X-Admin-Token": "s3cret"})

        assert require_admin_token(request, Settings(admin_token="s3cret")) is True

    def test_query_token_accepted(self):
        request = _request(query={"token": "s3cret"})

        assert require_admin_token(request, Settings(admin_token="s3cret")) is True


class TestRequestIp:
    def test_forwarded_for_preferred(self):
        request = _request({"x-forwarded-for": "198.51.100.4, 10.0.0.9"})

        assert request_ip(request) == "198.51.100.4"

    def test_peer_fallback(self):
        assert request_ip(_request()) == "10.0.0.1"


class TestRateLimiter:
    @pytest.mark.asyncio
    async def test_blocks_after_limit_and_recovers(self):
        now = [1000.0]
        limiter = RateLimiter(clock=lambda: now[0])
        check = limiter.check("upload", 2)
        request = _request()

        await check(request)
        await check(request)
        with pytest.raises(HTTPException) as exc_info:
            await check(request)

        assert exc_info.value.status_code == 429
        assert exc_info.value.headers["Retry-After"] == "61"

        now[0] += 61
        await check(request)

    @pytest.mark.asyncio
    async def test_limits_are_per_client(self):
        limiter = RateLimiter()
        check = limiter.check("upload", 1)

        await check(_request(peer="10.0.0.1"))
        await check(_request(peer="10.0.0.2"))

    @pytest.mark.asyncio
    async def test_custom_key_func(self):
        limiter = RateLimiter()
        check = limiter.check("upload", 1, key_func=lambda r: "shared")

        await check(_request(peer="10.0.0.1"))
        with pytest.raises(HTTPException):
            await check(_request(peer="10.0.0.2"))

    @pytest.mark.asyncio
    async def test_idle_clients_pruned_at_key_cap(self):
        now = [1000.0]
        limiter = RateLimiter(clock=lambda: now[0], max_keys=2)
        check = limiter.check("upload", 5)

        await check(_request(peer="10.0.0.1"))
        await check(_request(peer="10.0.0.2"))
        now[0] += 61
        await check(_request(peer="10.0.0.3"))

        assert list(limiter._requests) == ["upload:ip:10.0.0.3"]

    @pytest.mark.asyncio
    async def test_active_clients_kept_at_key_cap(self):
        now = [1000.0]
        limiter = RateLimiter(clock=lambda: now[0], max_keys=2)
        check = limiter.check("upload", 1)

        await check(_request(peer="10.0.0.1"))
        await check(_request(peer="10.0.0.2"))
        now[0] += 10
        await check(_request(peer="10.0.0.3"))

        assert len(limiter._requests) == 3
        with pytest.raises(HTTPException):
            await check(_request(peer="10.0.0.1"))
