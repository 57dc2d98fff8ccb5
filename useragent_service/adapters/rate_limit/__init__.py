"""Rate limiting adapters.

The service starts with an in-memory limiter; the abstract interface keeps
the HTTP layer unchanged if a shared store (e.g., Redis) is adopted later.
"""

from useragent_service.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from useragent_service.adapters.rate_limit.guard import RateLimitGuard, guard
from useragent_service.adapters.rate_limit.in_memory import InMemoryRollingWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryRollingWindowRateLimiter",
    "RateLimitGuard",
    "RateLimitResult",
    "guard",
]
