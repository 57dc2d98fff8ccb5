"""Rate-limit guard around arbitrary request handlers.

The guard only does bookkeeping under the limiter's lock; the downstream
handler always runs after the decision is made and the lock is released.
"""

from __future__ import annotations

import functools
import time
from datetime import timedelta
from typing import Any, Callable, TypeVar

from useragent_service.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from useragent_service.adapters.rate_limit.in_memory import InMemoryRollingWindowRateLimiter
from useragent_service.core.errors import RateLimitedError

T = TypeVar("T")


class RateLimitGuard:
    """Admits or rejects calls per client key using a rate limiter."""

    def __init__(self, limiter: AbstractRateLimiter) -> None:
        self._limiter = limiter

    @property
    def limiter(self) -> AbstractRateLimiter:
        return self._limiter

    def check(self, key: str) -> RateLimitResult:
        """Consume one unit for ``key``.

        Returns:
            The allowed result.

        Raises:
            RateLimitedError: If the key's budget for the window is spent.
        """
        result = self._limiter.consume(key)
        if not result.allowed:
            raise RateLimitedError(
                code="rate_limited",
                message="Rate limit exceeded. Try again later.",
                details={
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "retry_after": result.retry_after_seconds or 0,
                },
                result=result,
            )
        return result

    def __call__(self, key: str, handler: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``handler`` if ``key`` is within budget, else raise RateLimitedError."""
        self.check(key)
        return handler(*args, **kwargs)

    def wrap(self, key_func: Callable[..., str]) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Decorate a function, deriving the client key from its arguments.

        Example:
            >>> limited = guard(3, 1.0)
            >>> @limited.wrap(lambda client_ip: client_ip)
            ... def pick(client_ip):
            ...     return manager.random_any_text()
        """

        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> T:
                return self(key_func(*args, **kwargs), func, *args, **kwargs)

            return wrapper

        return decorator


def guard(
    max_requests: int,
    window: float | timedelta,
    *,
    clock: Callable[[], float] = time.monotonic,
    max_keys: int | None = None,
) -> RateLimitGuard:
    """Build a guard allowing ``max_requests`` per ``window`` for each key.

    Args:
        max_requests: Requests admitted per key per window; must be > 0.
        window: Window length, in seconds or as a timedelta; must be > 0.
        clock: Time source, injectable for tests.
        max_keys: Optional LRU bound on tracked keys.

    Raises:
        ValueError: If max_requests or window are not positive.
    """
    window_seconds = window.total_seconds() if isinstance(window, timedelta) else float(window)
    limiter = InMemoryRollingWindowRateLimiter(
        limit=max_requests,
        window_seconds=window_seconds,
        clock=clock,
        max_keys=max_keys,
    )
    return RateLimitGuard(limiter)
