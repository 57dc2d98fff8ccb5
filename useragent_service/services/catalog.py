"""Thread-safe catalog manager for desktop and mobile user agents.

The manager owns two immutable catalogs that are parsed and validated once
at construction and never mutated afterwards. Every read goes through the
shared side of a reader/writer lock; catalogs are installed under the
exclusive side.

Selection is uniform over catalog members and draws indices from the OS
CSPRNG (``secrets``). The ``weight`` carried by each entry is advisory
metadata describing real-world prevalence; it does not skew selection.
"""

from __future__ import annotations

import logging
import os
import secrets
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from useragent_service.core.errors import (
    CatalogSourceNotFoundError,
    CatalogValidationError,
    EmptyCatalogError,
    RandomSourceError,
)
from useragent_service.utils.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

DATA_PACKAGE = "useragent_service.data"
DEFAULT_DESKTOP_FILE = "desktop_useragents.json"
DEFAULT_MOBILE_FILE = "mobile_useragents.json"

MIN_TEXT_LENGTH = 10
MAX_TEXT_LENGTH = 1000
MIN_WEIGHT = 0.0
MAX_WEIGHT = 100.0


class Entry(BaseModel):
    """A single user-agent string and its declared prevalence (percent).

    Serialized as ``{"ua": ..., "pct": ...}``; the field names ``text`` and
    ``weight`` are accepted on input as well.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(
        ...,
        alias="ua",
        min_length=MIN_TEXT_LENGTH,
        max_length=MAX_TEXT_LENGTH,
        strict=True,
        description="User-agent string",
    )
    weight: float = Field(
        ...,
        alias="pct",
        ge=MIN_WEIGHT,
        le=MAX_WEIGHT,
        allow_inf_nan=False,
        strict=True,
        description="Advisory prevalence percentage; not used for selection",
    )


class Category(str, Enum):
    """Which catalog a selection is drawn from."""

    DESKTOP = "desktop"
    MOBILE = "mobile"
    RANDOM = "random"


class _ReadableSource(Protocol):
    def read_bytes(self) -> bytes: ...


CatalogSource = Union[bytes, bytearray, str, os.PathLike, _ReadableSource]

_ENTRY_LIST = TypeAdapter(list[Entry])


def secure_random_index(
    n: int,
    *,
    randbelow: Callable[[int], int] = secrets.randbelow,
) -> int:
    """Draw a uniformly distributed integer in ``[0, n)`` from the OS CSPRNG.

    ``secrets.randbelow`` rejection-samples over ``os.urandom`` bits, so the
    draw carries no modulo bias. There is no fallback to the
    ``random`` module.

    Args:
        n: Exclusive upper bound; must be positive.
        randbelow: Entropy-backed drawer, injectable for tests.

    Returns:
        The drawn index.

    Raises:
        ValueError: If ``n`` is not positive.
        RandomSourceError: If the entropy source fails.
    """
    if n <= 0:
        raise ValueError("n must be positive")

    try:
        return randbelow(n)
    except (OSError, NotImplementedError) as exc:
        logger.error(
            "catalog.random_source_failed",
            extra={"error_type": type(exc).__name__},
        )
        raise RandomSourceError(
            code="random_source_failure",
            message="Secure random source is unavailable",
        ) from exc


def default_sources() -> tuple[_ReadableSource, _ReadableSource]:
    """Return the desktop and mobile catalogs packaged with the service."""
    data = resources.files(DATA_PACKAGE)
    return data / DEFAULT_DESKTOP_FILE, data / DEFAULT_MOBILE_FILE


def _read_source(catalog: str, source: CatalogSource | None) -> bytes:
    """Resolve a catalog source into raw bytes.

    Raises:
        CatalogSourceNotFoundError: For an empty path or an unreadable file.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)

    if source is None or (isinstance(source, str) and not source.strip()):
        raise CatalogSourceNotFoundError(
            code="catalog_source_not_found",
            message=f"{catalog} catalog source path is empty",
            details={"catalog": catalog},
        )

    if isinstance(source, (str, os.PathLike)):
        source = Path(source)

    try:
        return source.read_bytes()
    except OSError as exc:
        raise CatalogSourceNotFoundError(
            code="catalog_source_not_found",
            message=f"{catalog} catalog source could not be read",
            details={"catalog": catalog, "source": str(source)},
        ) from exc


def _describe_validation_error(catalog: str, exc: ValidationError) -> CatalogValidationError:
    """Turn the first pydantic error into a catalog-specific domain error."""
    first = exc.errors(include_url=False)[0]
    loc = first.get("loc", ())
    msg = first.get("msg", "invalid value")

    if loc and isinstance(loc[0], int):
        index = loc[0]
        field = str(loc[1]) if len(loc) > 1 else "entry"
        return CatalogValidationError(
            code="catalog_invalid_entry",
            message=f"invalid {catalog} agent at index {index}: {field}: {msg}",
            details={"catalog": catalog, "index": index, "field": field},
        )

    return CatalogValidationError(
        code="catalog_malformed",
        message=f"malformed {catalog} catalog: {msg}",
        details={"catalog": catalog},
    )


def parse_catalog(catalog: str, raw: bytes) -> tuple[Entry, ...]:
    """Parse and validate a JSON list of entries.

    Args:
        catalog: Catalog name used in error messages (``desktop``/``mobile``).
        raw: JSON document holding a list of ``{ua, pct}`` objects.

    Returns:
        The validated entries, in source order.

    Raises:
        CatalogValidationError: If the document or any single entry is invalid.
    """
    try:
        entries = _ENTRY_LIST.validate_json(raw)
    except ValidationError as exc:
        raise _describe_validation_error(catalog, exc) from exc
    return tuple(entries)


def _coerce_entries(catalog: str, items: Iterable[Entry | dict[str, Any]]) -> tuple[Entry, ...]:
    try:
        entries = _ENTRY_LIST.validate_python(list(items))
    except ValidationError as exc:
        raise _describe_validation_error(catalog, exc) from exc
    return tuple(entries)


class CatalogManager:
    """Owns the desktop and mobile catalogs and serves random picks.

    Instances are read-only after construction and safe for any number of
    concurrent callers.
    """

    def __init__(
        self,
        desktop: Iterable[Entry | dict[str, Any]],
        mobile: Iterable[Entry | dict[str, Any]],
        *,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ) -> None:
        """Build a manager from in-memory entries.

        Args:
            desktop: Desktop entries (``Entry`` objects or ``{ua, pct}`` dicts).
            mobile: Mobile entries.
            randbelow: Entropy-backed index drawer.

        Raises:
            CatalogValidationError: If any entry is invalid or both catalogs
                are empty.
        """
        desktop_entries = _coerce_entries(Category.DESKTOP.value, desktop)
        mobile_entries = _coerce_entries(Category.MOBILE.value, mobile)

        if not desktop_entries and not mobile_entries:
            raise CatalogValidationError(
                code="catalog_empty",
                message="both desktop and mobile agent lists are empty",
            )

        self._lock = ReadWriteLock()
        self._randbelow = randbelow
        with self._lock.write():
            self._desktop: tuple[Entry, ...] = desktop_entries
            self._mobile: tuple[Entry, ...] = mobile_entries

    @classmethod
    def load(
        cls,
        desktop_source: CatalogSource,
        mobile_source: CatalogSource,
        *,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ) -> "CatalogManager":
        """Build a manager from two JSON sources.

        Sources may be raw bytes, file paths, or ``importlib.resources``
        traversables. Nothing is kept if either source fails.

        Raises:
            CatalogSourceNotFoundError: If a path is empty or unreadable.
            CatalogValidationError: If a source is malformed or holds an
                invalid entry.
        """
        desktop = parse_catalog(Category.DESKTOP.value, _read_source(Category.DESKTOP.value, desktop_source))
        mobile = parse_catalog(Category.MOBILE.value, _read_source(Category.MOBILE.value, mobile_source))

        manager = cls(desktop, mobile, randbelow=randbelow)
        logger.info(
            "catalog.loaded",
            extra={"desktop_count": len(desktop), "mobile_count": len(mobile)},
        )
        return manager

    @classmethod
    def load_default(cls, **kwargs: Any) -> "CatalogManager":
        """Build a manager from the catalogs packaged with the service."""
        desktop_source, mobile_source = default_sources()
        return cls.load(desktop_source, mobile_source, **kwargs)

    def all_desktop(self) -> list[Entry]:
        """Return a copy of all desktop entries."""
        with self._lock.read():
            return list(self._desktop)

    def all_mobile(self) -> list[Entry]:
        """Return a copy of all mobile entries."""
        with self._lock.read():
            return list(self._mobile)

    def sizes(self) -> dict[str, int]:
        with self._lock.read():
            return {
                Category.DESKTOP.value: len(self._desktop),
                Category.MOBILE.value: len(self._mobile),
            }

    def _pick(self, catalog: str, entries: Sequence[Entry]) -> Entry:
        # Caller holds the read lock.
        if not entries:
            raise EmptyCatalogError(
                code="catalog_empty",
                message=f"{catalog} agent list is empty",
                details={"catalog": catalog},
            )
        return entries[secure_random_index(len(entries), randbelow=self._randbelow)]

    def random_desktop(self) -> Entry:
        """Return a uniformly chosen desktop entry."""
        with self._lock.read():
            return self._pick(Category.DESKTOP.value, self._desktop)

    def random_mobile(self) -> Entry:
        """Return a uniformly chosen mobile entry."""
        with self._lock.read():
            return self._pick(Category.MOBILE.value, self._mobile)

    def random_any(self) -> Entry:
        """Return an entry chosen uniformly from desktop and mobile combined.

        Each entry counts once, so a catalog's share of picks is proportional
        to its size.
        """
        with self._lock.read():
            desktop_count = len(self._desktop)
            total = desktop_count + len(self._mobile)
            if total == 0:
                raise EmptyCatalogError(
                    code="catalog_empty",
                    message="agent list is empty",
                    details={"catalog": Category.RANDOM.value},
                )
            idx = secure_random_index(total, randbelow=self._randbelow)
            if idx < desktop_count:
                return self._desktop[idx]
            return self._mobile[idx - desktop_count]

    def random_desktop_text(self) -> str:
        return self.random_desktop().text

    def random_mobile_text(self) -> str:
        return self.random_mobile().text

    def random_any_text(self) -> str:
        return self.random_any().text

    def random_entry(self, category: Category | str) -> Entry:
        """Dispatch a pick by category name."""
        category = Category(category)
        if category is Category.DESKTOP:
            return self.random_desktop()
        if category is Category.MOBILE:
            return self.random_mobile()
        return self.random_any()

    def random_text(self, category: Category | str) -> str:
        return self.random_entry(category).text


def load(
    desktop_source: CatalogSource,
    mobile_source: CatalogSource,
    *,
    randbelow: Callable[[int], int] = secrets.randbelow,
) -> CatalogManager:
    """Build a :class:`CatalogManager` from two JSON sources."""
    return CatalogManager.load(desktop_source, mobile_source, randbelow=randbelow)
