"""Tests for global exception handlers.

Validates that every error type maps to the right HTTP status with a
consistent body and that internal details never reach the client.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from useragent_service.adapters.rate_limit.base import RateLimitResult
from useragent_service.core.errors import (
    AppError,
    CatalogNotInitializedError,
    CatalogValidationError,
    EmptyCatalogError,
    HistoryUnavailableError,
    InvalidRequestError,
    RandomSourceError,
    RateLimitedError,
)
from useragent_service.core.exception_handlers import (
    INTERNAL_ERROR_MESSAGE,
    SELECTION_UNAVAILABLE_MESSAGE,
    general_exception_handler,
    setup_exception_handlers,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


def _raise_on(app: FastAPI, path: str, exc: Exception) -> None:
    @app.get(path)
    async def endpoint():
        raise exc


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_invalid_request_returns_400_with_message(self, client: TestClient, app_with_handlers: FastAPI):
        _raise_on(app_with_handlers, "/bad", InvalidRequestError(code="invalid_limit", message="limit out of range"))

        response = client.get("/bad")

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "invalid_limit"
        assert data["error"]["message"] == "limit out of range"
        assert "request_id" in data["error"]

    @pytest.mark.parametrize(
        "exc",
        [
            EmptyCatalogError(code="catalog_empty", message="desktop agent list is empty"),
            RandomSourceError(code="random_source_failure", message="getrandom failed"),
            CatalogNotInitializedError(code="catalog_not_initialized", message="not initialized"),
        ],
    )
    def test_selection_failures_return_generic_503(self, client: TestClient, app_with_handlers: FastAPI, exc):
        _raise_on(app_with_handlers, "/select", exc)

        response = client.get("/select")

        assert response.status_code == 503
        assert response.json()["error"]["message"] == SELECTION_UNAVAILABLE_MESSAGE
        assert exc.message not in response.text

    def test_history_unavailable_returns_404(self, client: TestClient, app_with_handlers: FastAPI):
        _raise_on(
            app_with_handlers,
            "/history",
            HistoryUnavailableError(code="history_unavailable", message="Selection history is not available."),
        )

        response = client.get("/history")

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "history_unavailable"

    def test_other_app_errors_return_500(self, client: TestClient, app_with_handlers: FastAPI):
        _raise_on(
            app_with_handlers,
            "/catalog",
            CatalogValidationError(code="catalog_malformed", message="/etc/agents.json: bad json"),
        )

        response = client.get("/catalog")

        assert response.status_code == 500
        assert response.json()["error"]["message"] == INTERNAL_ERROR_MESSAGE
        assert "/etc/agents.json" not in response.text


class TestRateLimitedHandler:
    def test_returns_429_with_headers(self, client: TestClient, app_with_handlers: FastAPI):
        result = RateLimitResult(
            allowed=False, limit=5, remaining=0, reset_after_seconds=12.3, retry_after_seconds=13
        )
        _raise_on(
            app_with_handlers,
            "/limited",
            RateLimitedError(code="rate_limited", message="Rate limit exceeded. Try again later.", result=result),
        )

        response = client.get("/limited")

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "rate_limited"
        assert response.headers["Retry-After"] == "13"
        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "13"

    def test_without_result_omits_headers(self, client: TestClient, app_with_handlers: FastAPI):
        _raise_on(app_with_handlers, "/limited-bare", RateLimitedError(code="rate_limited", message="slow down"))

        response = client.get("/limited-bare")

        assert response.status_code == 429
        assert "Retry-After" not in response.headers


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        _raise_on(app_with_handlers, "/boom", RuntimeError("secret internal state"))

        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "secret internal state" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, ValueError("Test error with details")))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert "Traceback" not in data["error"]["message"]
        assert "ValueError" not in data["error"]["message"]
        assert "request_id" in data["error"]


def test_setup_registers_handlers(app_with_handlers: FastAPI):
    assert RateLimitedError in app_with_handlers.exception_handlers
    assert AppError in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers
