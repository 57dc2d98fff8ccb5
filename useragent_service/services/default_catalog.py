"""Process-wide default catalog manager and convenience functions.

This is an optional veneer for scripts that just want a user agent without
wiring a CatalogManager themselves. The manager is built lazily from the
packaged catalogs on first use. If that fails, the error is cached and
every later call raises CatalogNotInitializedError chained to it.
"""

from __future__ import annotations

import logging
import threading

from useragent_service.core.errors import CatalogConstructionError, CatalogNotInitializedError
from useragent_service.services.catalog import CatalogManager, Entry

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_manager: CatalogManager | None = None
_init_error: CatalogConstructionError | None = None
_initialized = False


def _initialize_locked() -> None:
    global _manager, _init_error, _initialized

    try:
        _manager = CatalogManager.load_default()
    except CatalogConstructionError as exc:
        _init_error = exc
        logger.error(
            "default_catalog.init_failed",
            extra={"error_code": exc.code, "error_message": exc.message},
        )
    _initialized = True


def get_default_manager() -> CatalogManager:
    """Return the shared manager, building it on first call.

    Raises:
        CatalogNotInitializedError: If construction failed (now or earlier).
    """
    if not _initialized:
        with _lock:
            if not _initialized:
                _initialize_locked()

    manager = _manager
    if manager is None:
        raise CatalogNotInitializedError(
            code="catalog_not_initialized",
            message="user agent catalog not initialized",
            details={"hint": _init_error.code} if _init_error is not None else None,
        ) from _init_error
    return manager


def get_init_error() -> CatalogConstructionError | None:
    """Return the cached construction error, initializing first if needed."""
    if not _initialized:
        with _lock:
            if not _initialized:
                _initialize_locked()
    return _init_error


def reset_default_manager() -> None:
    """Forget the shared manager and any cached error (tests only)."""
    global _manager, _init_error, _initialized

    with _lock:
        _manager = None
        _init_error = None
        _initialized = False


def get_all_desktop() -> list[Entry]:
    return get_default_manager().all_desktop()


def get_all_mobile() -> list[Entry]:
    return get_default_manager().all_mobile()


def get_random_desktop() -> Entry:
    return get_default_manager().random_desktop()


def get_random_mobile() -> Entry:
    return get_default_manager().random_mobile()


def get_random_desktop_text() -> str:
    return get_default_manager().random_desktop_text()


def get_random_mobile_text() -> str:
    return get_default_manager().random_mobile_text()


def get_random_text() -> str:
    """Return a user agent drawn from desktop and mobile combined."""
    return get_default_manager().random_any_text()
