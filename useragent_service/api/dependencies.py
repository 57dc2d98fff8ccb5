"""FastAPI dependencies resolving services built at startup."""

from __future__ import annotations

from fastapi import Request

from useragent_service.adapters.audit.in_memory import InMemorySelectionRecorder
from useragent_service.core.errors import HistoryUnavailableError
from useragent_service.services.catalog import CatalogManager
from useragent_service.services.selection_service import SelectionService


def get_selection_service(request: Request) -> SelectionService:
    """Return the SelectionService stored on app.state by the lifespan hook."""
    return request.app.state.selection_service


def get_catalog_manager(request: Request) -> CatalogManager:
    return get_selection_service(request).manager


def get_audit_buffer(request: Request) -> InMemorySelectionRecorder:
    """Return the in-memory audit recorder.

    Raises:
        HistoryUnavailableError: 404 if APP_AUDIT_BACKEND is not ``memory``.
    """
    recorder = get_selection_service(request).recorder
    if not isinstance(recorder, InMemorySelectionRecorder):
        raise HistoryUnavailableError(
            code="history_unavailable",
            message="Selection history is not available on this deployment.",
        )
    return recorder
