"""In-memory rolling-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: one lock guards the whole check-and-increment.
- Memory grows with the number of distinct keys unless ``max_keys`` is set.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from useragent_service.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class _ClientWindow:
    count: int
    window_start: float


class InMemoryRollingWindowRateLimiter(AbstractRateLimiter):
    """Counts requests per key inside a window that opens on first sighting.

    A key's window starts with its first request and expires once more than
    ``window_seconds`` have elapsed; the next request after that opens a new
    window with a count of one. Requests beyond ``limit`` inside a window are
    rejected and leave the counter unchanged.

    Important:
        Stale keys are never pruned by default. Pass ``max_keys`` to bound
        memory; the least recently seen key is then evicted, which forgets
        its counter.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_keys: int | None = None,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_seconds: Length of each key's window in seconds.
            clock: Time source returning seconds.
            max_keys: Optional bound on tracked keys (LRU eviction).

        Raises:
            ValueError: If limit, window_seconds or max_keys are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")
        if max_keys is not None and max_keys < 1:
            raise ValueError("max_keys must be >= 1")

        self._limit = limit
        self._window_seconds = float(window_seconds)
        self._clock = clock
        self._max_keys = max_keys
        self._lock = threading.Lock()
        self._state_by_key: OrderedDict[str, _ClientWindow] = OrderedDict()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def tracked_keys(self) -> int:
        """Return how many client keys currently hold a counter."""
        with self._lock:
            return len(self._state_by_key)

    def _reset_after(self, state: _ClientWindow, now: float) -> float:
        return max(0.0, state.window_start + self._window_seconds - now)

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_keys is None:
            return

        while len(self._state_by_key) > self._max_keys:
            # popitem(last=False) drops the least recently seen key
            self._state_by_key.popitem(last=False)
            logger.debug("rate_limit.evicted", extra={"tracked_keys": len(self._state_by_key)})

    def _allowed(self, state: _ClientWindow, now: float) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._limit,
            remaining=max(0, self._limit - state.count),
            reset_after_seconds=self._reset_after(state, now),
            retry_after_seconds=None,
        )

    def _blocked(self, state: _ClientWindow | None, now: float) -> RateLimitResult:
        if state is None:
            reset_after = self._window_seconds
            remaining = self._limit
        else:
            reset_after = self._reset_after(state, now)
            remaining = max(0, self._limit - state.count)
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=remaining,
            reset_after_seconds=reset_after,
            retry_after_seconds=max(1, int(math.ceil(reset_after))),
        )

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for the provided key.

        Args:
            key: Opaque client identifier.
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

        with self._lock:
            now = self._clock()
            state = self._state_by_key.get(key)

            if state is None or now - state.window_start > self._window_seconds:
                if cost > self._limit:
                    return self._blocked(None, now)
                state = _ClientWindow(count=cost, window_start=now)
                self._state_by_key[key] = state
                self._state_by_key.move_to_end(key)
                self._evict_if_over_capacity_locked()
                return self._allowed(state, now)

            self._state_by_key.move_to_end(key)

            if state.count + cost <= self._limit:
                state.count += cost
                return self._allowed(state, now)

            return self._blocked(state, now)
