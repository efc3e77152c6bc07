"""In-memory sliding window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Approximates a rolling window by weighting the previous fixed window's
  count by how much of it still overlaps the rolling interval.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _SlidingState:
    window_start: int
    current_count: int
    previous_count: int


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a sliding window counter per key.

    The effective usage at time ``now`` is::

        previous_count * (1 - elapsed / window) + current_count

    where ``elapsed`` is the time since the current fixed window started. A
    request is admitted when the effective usage plus its cost stays within
    the limit, so a burst admits exactly ``limit`` requests.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the sliding window limiter.

        Args:
            limit: Maximum number of allowed units per rolling window.
            window_seconds: Size of the rolling window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _SlidingState] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> int:
        return self._window_seconds

    def _current_window_start(self, now: float) -> int:
        return int(now // self._window_seconds) * self._window_seconds

    def _advance_state(self, key: str, window_start: int) -> _SlidingState:
        """Roll the per-key counters forward to the window containing now."""
        state = self._state_by_key.get(key)
        if state is None:
            state = _SlidingState(window_start=window_start, current_count=0, previous_count=0)
            self._state_by_key[key] = state
            return state

        if state.window_start == window_start:
            return state

        if state.window_start + self._window_seconds == window_start:
            # Moved into the adjacent window: current becomes previous.
            state.previous_count = state.current_count
        else:
            # More than one full window elapsed; nothing overlaps any more.
            state.previous_count = 0
        state.current_count = 0
        state.window_start = window_start
        return state

    def _effective_count(self, state: _SlidingState, now: float) -> float:
        elapsed = now - state.window_start
        overlap = max(0.0, 1.0 - elapsed / self._window_seconds)
        return state.previous_count * overlap + state.current_count

    def _retry_after(self, state: _SlidingState, now: float, cost: int) -> int:
        """Seconds until enough of the previous window has slid out."""
        reset_at = state.window_start + self._window_seconds
        if state.current_count + cost > self._limit or state.previous_count == 0:
            # The current window alone is full: wait for it to roll over.
            return max(1, int(math.ceil(reset_at - now)))

        # Solve previous * (1 - t / window) + current + cost <= limit for t.
        needed_overlap = (self._limit - state.current_count - cost) / state.previous_count
        t = (1.0 - needed_overlap) * self._window_seconds
        return max(1, int(math.ceil(state.window_start + t - now)))

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for the provided key.

        Args:
            key: Unique identifier for rate limiting (e.g., bucket + client IP).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        window_start = self._current_window_start(now)
        reset_at = window_start + self._window_seconds

        with self._lock:
            state = self._advance_state(key, window_start)
            effective = self._effective_count(state, now)

            if effective + cost <= self._limit:
                state.current_count += cost
                remaining = max(0, int(self._limit - (effective + cost)))
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=remaining,
                    reset_at=reset_at,
                    retry_after_seconds=None,
                )

            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=0,
                reset_at=reset_at,
                retry_after_seconds=self._retry_after(state, now, cost),
            )

    def reset(self) -> None:
        """Forget all tracked keys."""
        with self._lock:
            self._state_by_key.clear()
