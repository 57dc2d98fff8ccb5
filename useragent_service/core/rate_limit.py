"""Rate limiting dependency for FastAPI routes.

This module wires the rate limit guard into the HTTP layer. The guard
itself is generic over an opaque key; deriving that key from a request
(client IP, honoring proxy headers) happens here.

Rate limiting strategy:
- Rolling window per client IP, opened on the client's first request.
- Rejections raise RateLimitedError, which the exception handlers turn into
  HTTP 429 with Retry-After / X-RateLimit-* headers.
"""

from __future__ import annotations

import hashlib
import ipaddress
import logging

from fastapi import Request

from useragent_service.adapters.rate_limit.guard import RateLimitGuard, guard
from useragent_service.core.config import settings
from useragent_service.core.errors import RateLimitedError

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

_guard: RateLimitGuard | None = None
_guard_config: tuple[int, float, int | None] | None = None


def get_rate_limit_guard() -> RateLimitGuard:
    """Return the process-wide guard, rebuilding it if settings changed.

    Returns:
        RateLimitGuard: Guard backed by an in-memory rolling-window limiter.
    """

    global _guard, _guard_config

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
        settings.app.rate_limit_max_keys,
    )

    if _guard is None or _guard_config != config:
        _guard = guard(
            settings.app.rate_limit_requests,
            settings.app.rate_limit_window_seconds,
            max_keys=settings.app.rate_limit_max_keys,
        )
        _guard_config = config

    return _guard


def sanitize_ip(value: str | None) -> str:
    """Normalize an IP address, or return "unknown" if it does not parse."""

    if not value:
        return UNKNOWN_CLIENT
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError:
        return UNKNOWN_CLIENT


def client_key_from_request(request: Request) -> str:
    """Derive the client key for a request.

    Order: first valid address in X-Forwarded-For, then X-Real-IP, then the
    socket peer. Values that are not IP addresses are ignored.

    Args:
        request: FastAPI request.

    Returns:
        str: Normalized IP address, or "unknown".
    """

    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        candidate = sanitize_ip(forwarded_for.split(",")[0])
        if candidate != UNKNOWN_CLIENT:
            return candidate

    real_ip = sanitize_ip(request.headers.get("X-Real-IP"))
    if real_ip != UNKNOWN_CLIENT:
        return real_ip

    return sanitize_ip(request.client.host if request.client else None)


def _hash_limiter_key(key: str) -> str:
    """Hash the limiter key so logs can correlate clients without storing IPs."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the per-client rate limit.

    Args:
        request: FastAPI request.

    Raises:
        RateLimitedError: When the client exceeded its budget for the window.
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter_guard = get_rate_limit_guard()
    key = client_key_from_request(request)
    key_hash = _hash_limiter_key(key)

    try:
        result = limiter_guard.check(key)
    except RateLimitedError as exc:
        denied = exc.result
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "key_hash": key_hash,
                "limit": denied.limit if denied else None,
                "window_s": settings.app.rate_limit_window_seconds,
                "retry_after_s": denied.retry_after_seconds if denied else None,
            },
        )
        raise

    logger.debug(
        "rate_limit.allowed",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "remaining": result.remaining,
            "window_s": settings.app.rate_limit_window_seconds,
        },
    )
