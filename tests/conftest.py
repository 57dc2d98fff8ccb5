"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment variables are pinned here, before any import that builds the
global settings object.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "10000")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "60")
os.environ.setdefault("APP_AUDIT_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from useragent_service.core import rate_limit  # noqa: E402
from useragent_service.services.catalog import CatalogManager, Entry  # noqa: E402

DESKTOP_AGENTS = [
    {"ua": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/131.0.0.0", "pct": 40.0},
    {"ua": "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) Safari/605.1.15", "pct": 30.0},
    {"ua": "Mozilla/5.0 (X11; Linux x86_64; rv:133.0) Firefox/133.0", "pct": 20.0},
    {"ua": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Edg/131.0.0.0", "pct": 10.0},
]

MOBILE_AGENTS = [
    {"ua": "Mozilla/5.0 (iPhone; CPU iPhone OS 18_1 like Mac OS X) Mobile Safari", "pct": 55.0},
    {"ua": "Mozilla/5.0 (Linux; Android 14; Pixel 8) Chrome/131.0.0.0 Mobile", "pct": 45.0},
]


@pytest.fixture(autouse=True)
def reset_rate_limit_guard(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test a fresh process-wide rate limit guard."""
    monkeypatch.setattr(rate_limit, "_guard", None)
    monkeypatch.setattr(rate_limit, "_guard_config", None)


@pytest.fixture
def desktop_agents() -> list[dict]:
    return [dict(item) for item in DESKTOP_AGENTS]


@pytest.fixture
def mobile_agents() -> list[dict]:
    return [dict(item) for item in MOBILE_AGENTS]


@pytest.fixture
def desktop_entries() -> list[Entry]:
    return [Entry.model_validate(item) for item in DESKTOP_AGENTS]


@pytest.fixture
def mobile_entries() -> list[Entry]:
    return [Entry.model_validate(item) for item in MOBILE_AGENTS]


@pytest.fixture
def manager(desktop_entries: list[Entry], mobile_entries: list[Entry]) -> CatalogManager:
    return CatalogManager(desktop_entries, mobile_entries)
