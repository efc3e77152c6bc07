"""Rate limiting adapters.

This package provides a small abstraction layer so the service can start with
an in-memory limiter and later migrate to a shared store without changing the
API layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.sliding_window import InMemorySlidingWindowRateLimiter

__all__ = ["AbstractRateLimiter", "RateLimitResult", "InMemorySlidingWindowRateLimiter"]
