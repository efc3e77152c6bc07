"""Unit tests for the in-memory sliding window rate limiter."""

from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.sliding_window import InMemorySlidingWindowRateLimiter


def test_allows_up_to_limit_in_same_window() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is True
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 0


def test_blocks_request_after_limit() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=40, window_seconds=60, clock=clock)

    for _ in range(40):
        assert limiter.consume("ip").allowed is True

    blocked = limiter.consume("ip")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds is not None
    assert blocked.retry_after_seconds > 0


def test_previous_window_still_counts_right_after_boundary() -> None:
    # Window [960, 1020); fill it late, then step just past the boundary.
    clock = Mock(return_value=1019.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=4, window_seconds=60, clock=clock)
    for _ in range(4):
        assert limiter.consume("k").allowed is True

    clock.return_value = 1021.0
    # 4 * (1 - 1/60) is about 3.93, so nothing fits yet.
    assert limiter.consume("k").allowed is False


def test_budget_recovers_as_previous_window_slides_out() -> None:
    clock = Mock(return_value=1019.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=4, window_seconds=60, clock=clock)
    for _ in range(4):
        limiter.consume("k")

    # Halfway through the next window the previous one weighs 4 * 0.5 = 2.
    clock.return_value = 1050.0
    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is False


def test_budget_fully_restored_after_two_windows() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.consume("k").allowed is True
    assert limiter.consume("k").allowed is False

    clock.return_value = 1025.0
    assert limiter.consume("k").allowed is True


def test_retry_after_points_at_time_budget_frees_up() -> None:
    clock = Mock(return_value=1019.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=4, window_seconds=60, clock=clock)
    for _ in range(4):
        limiter.consume("k")

    clock.return_value = 1021.0
    blocked = limiter.consume("k")
    assert blocked.allowed is False
    # One slot frees once 4 * (1 - t/60) <= 3, i.e. t >= 15s into the window.
    assert blocked.retry_after_seconds == 14


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.consume("like:1.1.1.1").allowed is True
    assert limiter.consume("like:1.1.1.1").allowed is False

    assert limiter.consume("like:2.2.2.2").allowed is True


def test_reset_forgets_usage() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=lambda: 1000.0)
    limiter.consume("k")
    limiter.reset()
    assert limiter.consume("k").allowed is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)


def test_invalid_consume_args() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60)

    with pytest.raises(ValueError):
        limiter.consume("")

    with pytest.raises(ValueError):
        limiter.consume("k", cost=0)
