"""Audit recorder that emits selections as structured log lines."""

from __future__ import annotations

import logging

from useragent_service.adapters.audit.base import AbstractSelectionRecorder, SelectionRecord

logger = logging.getLogger(__name__)


class LoggingSelectionRecorder(AbstractSelectionRecorder):
    """Write each selection as a ``selection.recorded`` event.

    The log store downstream is responsible for retention. The client key is
    redacted by the logging filters unless explicitly allow-listed.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    def record(self, record: SelectionRecord) -> None:
        self._logger.info(
            "selection.recorded",
            extra={
                "category": record.category,
                "user_agent": record.text,
                "selected_at": record.timestamp.isoformat(),
                "client_key": record.client_key,
                "endpoint": record.endpoint,
            },
        )
