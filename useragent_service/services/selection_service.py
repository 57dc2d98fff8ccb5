"""Selection orchestration: pick from the catalogs, then audit the pick.

The catalog manager never talks to the audit sink; this service is the
orchestrator that hands each successful selection to the recorder.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from useragent_service.adapters.audit.base import AbstractSelectionRecorder, SelectionRecord
from useragent_service.services.catalog import CatalogManager, Category

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SelectionService:
    """Serve user agents for a category and record each one served."""

    def __init__(
        self,
        manager: CatalogManager,
        recorder: AbstractSelectionRecorder | None = None,
        *,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._manager = manager
        self._recorder = recorder
        self._now = now

    @property
    def manager(self) -> CatalogManager:
        return self._manager

    @property
    def recorder(self) -> AbstractSelectionRecorder | None:
        return self._recorder

    def select(self, category: Category | str, *, client_key: str, endpoint: str) -> SelectionRecord:
        """Pick a user agent and audit it.

        Args:
            category: ``desktop``, ``mobile`` or ``random``.
            client_key: Sanitized client identifier.
            endpoint: Path or operation name serving the request.

        Returns:
            The record of the selection.

        Raises:
            EmptyCatalogError: If the requested catalog has no entries.
            RandomSourceError: If the secure random source fails.
        """
        category = Category(category)
        text = self._manager.random_text(category)

        record = SelectionRecord(
            text=text,
            category=category.value,
            timestamp=self._now(),
            client_key=client_key,
            endpoint=endpoint,
        )

        if self._recorder is not None:
            try:
                self._recorder.record(record)
            except Exception as exc:
                # Audit failures never fail a selection.
                logger.warning(
                    "selection.record_failed",
                    extra={
                        "category": record.category,
                        "endpoint": endpoint,
                        "error_type": type(exc).__name__,
                    },
                )

        return record
