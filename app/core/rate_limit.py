"""Rate limiting dependencies for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Strategy:
- Sliding window per client IP, one independent limiter per named bucket
  (``like`` and ``unlike`` use separate budgets).
- The client IP is the first entry of ``X-Forwarded-For``; without that
  header every caller shares the ``127.0.0.1`` budget.
- The dependency requires an authenticated user first, so anonymous callers
  get 401 without spending quota.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Callable

from fastapi import Depends, Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.sliding_window import InMemorySlidingWindowRateLimiter
from app.core.auth import get_current_user
from app.core.config import settings
from app.core.errors import RateLimitAppError
from app.models import User

logger = logging.getLogger(__name__)

LIKE_BUCKET = "like"
UNLIKE_BUCKET = "unlike"

DEFAULT_CLIENT_IP = "127.0.0.1"
RATE_LIMIT_MESSAGE = "You are sending too many requests. Please try again after sometime"

_limiters: dict[str, AbstractRateLimiter] = {}
_limiter_config: tuple[int, int] | None = None


def get_rate_limiter(bucket: str) -> AbstractRateLimiter:
    """Return the process-wide limiter for ``bucket``.

    Instances are cached in-module to preserve state across requests. If the
    configuration changes (primarily in tests), all limiters are rebuilt.
    """

    global _limiter_config

    config = (
        settings.app.like_rate_limit_requests,
        settings.app.like_rate_limit_window_seconds,
    )
    if _limiter_config != config:
        _limiters.clear()
        _limiter_config = config

    limiter = _limiters.get(bucket)
    if limiter is None:
        limiter = InMemorySlidingWindowRateLimiter(limit=config[0], window_seconds=config[1])
        _limiters[bucket] = limiter
    return limiter


def reset_rate_limiters() -> None:
    """Drop all limiter state."""
    for limiter in _limiters.values():
        limiter.reset()
    _limiters.clear()


def client_ip(request: Request) -> str:
    """Best-effort client address used as the rate limit key."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded is None:
        return DEFAULT_CLIENT_IP
    return forwarded.split(",")[0].strip() or DEFAULT_CLIENT_IP


def _hash_limiter_key(key: str) -> str:
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def check_rate_limit(bucket: str, ip: str) -> None:
    """Consume one unit from ``bucket`` for ``ip``.

    Raises:
        RateLimitAppError: When the budget for the rolling window is spent.
    """
    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter(bucket)
    key = f"{bucket}:{ip}"
    key_hash = _hash_limiter_key(key)

    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "bucket": bucket,
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "bucket": bucket,
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_s": settings.app.like_rate_limit_window_seconds,
            "retry_after_s": retry_after,
        },
    )

    details = None
    if settings.app.rate_limit_include_headers:
        details = {
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_at": result.reset_at,
            "retry_after": retry_after,
        }

    raise RateLimitAppError(code="rate_limited", message=RATE_LIMIT_MESSAGE, details=details)


def rate_limit(bucket: str) -> Callable[..., User]:
    """Build a dependency that authenticates, then rate limits by client IP.

    Usage:
        @router.post("/posts/{post_id}/likes")
        def like(user: User = Depends(rate_limit(LIKE_BUCKET))): ...

    Returns:
        Dependency resolving to the authenticated user.
    """

    def dependency(request: Request, user: User = Depends(get_current_user)) -> User:
        check_rate_limit(bucket, client_ip(request))
        return user

    dependency.__name__ = f"rate_limit_{bucket}"
    return dependency
