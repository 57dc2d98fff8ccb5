"""Selection audit adapters."""

from useragent_service.adapters.audit.base import AbstractSelectionRecorder, SelectionRecord
from useragent_service.adapters.audit.in_memory import InMemorySelectionRecorder
from useragent_service.adapters.audit.logging_recorder import LoggingSelectionRecorder

__all__ = [
    "AbstractSelectionRecorder",
    "InMemorySelectionRecorder",
    "LoggingSelectionRecorder",
    "SelectionRecord",
]
