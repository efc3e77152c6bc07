"""Tests for the HTTP-facing rate limit helpers."""

import pytest
from fastapi import Request

from app.core import rate_limit
from app.core.config import settings
from app.core.errors import RateLimitAppError


def _request(headers: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "POST", "path": "/", "headers": raw})


class TestClientIp:
    def test_uses_first_forwarded_address(self) -> None:
        request = _request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert rate_limit.client_ip(request) == "203.0.113.7"

    def test_strips_whitespace(self) -> None:
        request = _request({"X-Forwarded-For": "  198.51.100.2 ,10.0.0.1"})
        assert rate_limit.client_ip(request) == "198.51.100.2"

    def test_defaults_to_loopback_without_header(self) -> None:
        assert rate_limit.client_ip(_request()) == "127.0.0.1"


class TestCheckRateLimit:
    def test_raises_after_budget_spent(self) -> None:
        limit = settings.app.like_rate_limit_requests
        for _ in range(limit):
            rate_limit.check_rate_limit(rate_limit.LIKE_BUCKET, "1.1.1.1")

        with pytest.raises(RateLimitAppError) as exc_info:
            rate_limit.check_rate_limit(rate_limit.LIKE_BUCKET, "1.1.1.1")

        assert exc_info.value.code == "rate_limited"
        assert exc_info.value.message == rate_limit.RATE_LIMIT_MESSAGE
        assert exc_info.value.details["limit"] == limit
        assert exc_info.value.details["remaining"] == 0

    def test_buckets_are_independent(self) -> None:
        for _ in range(settings.app.like_rate_limit_requests):
            rate_limit.check_rate_limit(rate_limit.LIKE_BUCKET, "1.1.1.1")

        # The unlike budget for the same address is untouched.
        rate_limit.check_rate_limit(rate_limit.UNLIKE_BUCKET, "1.1.1.1")

    def test_disabled_never_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.app, "rate_limit_enabled", False)
        for _ in range(settings.app.like_rate_limit_requests + 5):
            rate_limit.check_rate_limit(rate_limit.LIKE_BUCKET, "1.1.1.1")

    def test_details_omitted_when_headers_disabled(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings.app, "like_rate_limit_requests", 1)
        monkeypatch.setattr(settings.app, "rate_limit_include_headers", False)

        rate_limit.check_rate_limit(rate_limit.LIKE_BUCKET, "1.1.1.1")
        with pytest.raises(RateLimitAppError) as exc_info:
            rate_limit.check_rate_limit(rate_limit.LIKE_BUCKET, "1.1.1.1")

        assert exc_info.value.details is None


def test_limiters_rebuilt_when_config_changes(monkeypatch: pytest.MonkeyPatch) -> None:
    first = rate_limit.get_rate_limiter(rate_limit.LIKE_BUCKET)
    assert rate_limit.get_rate_limiter(rate_limit.LIKE_BUCKET) is first

    monkeypatch.setattr(settings.app, "like_rate_limit_window_seconds", 30)
    assert rate_limit.get_rate_limiter(rate_limit.LIKE_BUCKET) is not first
