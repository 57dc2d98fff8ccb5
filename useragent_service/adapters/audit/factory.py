"""Factory for selection audit recorders."""

from useragent_service.adapters.audit.base import AbstractSelectionRecorder
from useragent_service.adapters.audit.in_memory import InMemorySelectionRecorder
from useragent_service.adapters.audit.logging_recorder import LoggingSelectionRecorder
from useragent_service.core.config import AppSettings, settings


def create_selection_recorder(app_settings: AppSettings | None = None) -> AbstractSelectionRecorder:
    """Instantiate the audit recorder named by ``APP_AUDIT_BACKEND``.

    Args:
        app_settings: Optional settings override; defaults to global settings.

    Returns:
        AbstractSelectionRecorder: ``log`` → LoggingSelectionRecorder,
            ``memory`` → InMemorySelectionRecorder.
    """
    cfg = app_settings or settings.app

    if cfg.audit_backend == "memory":
        return InMemorySelectionRecorder(max_records=cfg.audit_max_records)

    return LoggingSelectionRecorder()
