"""Application-level exception types.

This module defines the domain errors raised by the catalog manager, the
rate limiter and the selection service, enabling consistent error handling,
logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

if TYPE_CHECKING:
    from useragent_service.adapters.rate_limit.base import RateLimitResult


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional; only the ones relevant to an error are populated.
    """

    code: str
    message: str
    hint: str
    catalog: str
    index: int
    field: str
    source: str
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class InvalidRequestError(AppError):
    """Raised when client-supplied parameters are out of range."""


class HistoryUnavailableError(AppError):
    """Raised when selection history is requested but not kept in memory."""


class CatalogConstructionError(AppError):
    """Raised when a catalog manager cannot be built.

    Construction is all-or-nothing, so this is fatal at startup.
    """


class CatalogSourceNotFoundError(CatalogConstructionError):
    """Raised when a catalog source path is empty, missing or unreadable."""


class CatalogValidationError(CatalogConstructionError):
    """Raised when a catalog source is malformed or holds an invalid entry."""


class CatalogNotInitializedError(AppError):
    """Raised by the default catalog holder when its construction failed."""


class EmptyCatalogError(AppError):
    """Raised when a selection is attempted on a catalog with zero entries."""


class RandomSourceError(AppError):
    """Raised when the secure entropy source fails."""


@dataclass
class RateLimitedError(AppError):
    """Raised when a client key has exhausted its request budget."""

    result: "RateLimitResult | None" = None
