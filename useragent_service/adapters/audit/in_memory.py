"""In-memory audit recorder with a bounded ring buffer.

Keeps the most recent selections for the logs/stats endpoints. Nothing
survives a restart and each worker process keeps its own buffer.
"""

from __future__ import annotations

import threading
from collections import Counter, deque
from datetime import datetime

from useragent_service.adapters.audit.base import AbstractSelectionRecorder, SelectionRecord

VALID_CATEGORIES = ("desktop", "mobile", "random")


class InMemorySelectionRecorder(AbstractSelectionRecorder):
    """Thread-safe ring buffer of selection records.

    Attributes:
        max_records: Capacity; the oldest record is dropped when full.
    """

    def __init__(self, max_records: int = 10000) -> None:
        if max_records < 1:
            raise ValueError("max_records must be >= 1")
        self._max_records = max_records
        self._records: deque[SelectionRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def record(self, record: SelectionRecord) -> None:
        with self._lock:
            self._records.append(record)

    def recent(self, limit: int = 50, *, category: str | None = None) -> list[SelectionRecord]:
        """Return up to ``limit`` records, newest first.

        Args:
            limit: Number of records to return (1..1000).
            category: Optional filter on ``desktop``/``mobile``/``random``.

        Raises:
            ValueError: If limit is out of range or category is unknown.
        """
        if limit < 1 or limit > 1000:
            raise ValueError("limit must be between 1 and 1000")
        if category is not None and category not in VALID_CATEGORIES:
            raise ValueError(f"invalid category: {category}")

        with self._lock:
            snapshot = list(self._records)

        result: list[SelectionRecord] = []
        for record in reversed(snapshot):
            if category is not None and record.category != category:
                continue
            result.append(record)
            if len(result) >= limit:
                break
        return result

    def stats(self) -> dict[str, int | str | None]:
        """Aggregate counts over the buffered records."""
        with self._lock:
            snapshot = list(self._records)

        by_category = Counter(record.category for record in snapshot)
        last: datetime | None = max((r.timestamp for r in snapshot), default=None)
        return {
            "total_requests": len(snapshot),
            "desktop_requests": by_category.get("desktop", 0),
            "mobile_requests": by_category.get("mobile", 0),
            "random_requests": by_category.get("random", 0),
            "unique_clients": len({record.client_key for record in snapshot}),
            "last_request": last.isoformat() if last else None,
        }

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
