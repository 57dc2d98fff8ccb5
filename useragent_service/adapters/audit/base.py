"""Selection audit interfaces.

Every accepted selection produces a SelectionRecord. Where records end up
(log pipeline, ring buffer, a database) is the recorder's concern.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class SelectionRecord:
    """One served user agent.

    Attributes:
        text: The user-agent string handed to the caller.
        category: ``desktop``, ``mobile`` or ``random``.
        timestamp: UTC time of the selection.
        client_key: Sanitized client identifier (e.g., IP address).
        endpoint: Path or operation name that served the selection.
    """

    text: str
    category: str
    timestamp: datetime
    client_key: str
    endpoint: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class AbstractSelectionRecorder(ABC):
    """Interface for selection audit sinks."""

    @abstractmethod
    def record(self, record: SelectionRecord) -> None:
        """Persist or forward a selection record.

        Args:
            record: The selection to audit.
        """
        raise NotImplementedError
