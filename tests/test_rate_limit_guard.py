"""Tests for the rate-limit guard wrapper."""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from useragent_service import guard
from useragent_service.core.errors import AppError, RateLimitedError


def test_guard_invokes_handler_when_allowed() -> None:
    limited = guard(2, 1.0, clock=Mock(return_value=0.0))
    handler = Mock(return_value="ok")

    assert limited("1.2.3.4", handler, "a", flag=True) == "ok"
    handler.assert_called_once_with("a", flag=True)


def test_guard_does_not_invoke_handler_when_rejected() -> None:
    limited = guard(1, 1.0, clock=Mock(return_value=0.0))
    handler = Mock(return_value="ok")

    limited("1.2.3.4", handler)
    with pytest.raises(RateLimitedError) as exc_info:
        limited("1.2.3.4", handler)

    assert handler.call_count == 1
    error = exc_info.value
    assert isinstance(error, AppError)
    assert error.code == "rate_limited"
    assert error.result is not None
    assert error.result.allowed is False
    assert error.details["limit"] == 1
    assert error.details["retry_after"] == 1


def test_check_returns_allowed_result() -> None:
    limited = guard(3, 60, clock=Mock(return_value=0.0))

    result = limited.check("k")

    assert result.allowed is True
    assert result.remaining == 2


def test_guard_accepts_timedelta_window() -> None:
    clock = Mock(return_value=0.0)
    limited = guard(1, timedelta(minutes=1), clock=clock)

    assert limited.limiter.window_seconds == 60.0
    limited.check("k")

    clock.return_value = 59.0
    with pytest.raises(RateLimitedError):
        limited.check("k")

    clock.return_value = 61.0
    assert limited.check("k").allowed is True


def test_wrap_derives_key_from_arguments() -> None:
    limited = guard(1, 60, clock=Mock(return_value=0.0))

    @limited.wrap(lambda client_ip, category: client_ip)
    def pick(client_ip: str, category: str) -> str:
        return f"{client_ip}:{category}"

    assert pick("10.0.0.1", "desktop") == "10.0.0.1:desktop"
    assert pick("10.0.0.2", "mobile") == "10.0.0.2:mobile"
    with pytest.raises(RateLimitedError):
        pick("10.0.0.1", "mobile")
    assert pick.__name__ == "pick"


def test_handler_errors_propagate() -> None:
    limited = guard(5, 60)

    def boom() -> None:
        raise RuntimeError("handler failed")

    with pytest.raises(RuntimeError, match="handler failed"):
        limited("k", boom)


@pytest.mark.parametrize(
    ("max_requests", "window"),
    [(0, 1.0), (-3, 1.0), (1, 0), (1, -1.0), (1, timedelta(0))],
)
def test_guard_rejects_invalid_config(max_requests, window) -> None:
    with pytest.raises(ValueError):
        guard(max_requests, window)
