"""Random browser user agents from curated desktop and mobile catalogs."""

from useragent_service.adapters.rate_limit.guard import RateLimitGuard, guard
from useragent_service.core.errors import (
    AppError,
    CatalogConstructionError,
    CatalogNotInitializedError,
    CatalogSourceNotFoundError,
    CatalogValidationError,
    EmptyCatalogError,
    RandomSourceError,
    RateLimitedError,
)
from useragent_service.services.catalog import CatalogManager, Category, Entry, load

__version__ = "1.0.0"

__all__ = [
    "AppError",
    "CatalogConstructionError",
    "CatalogManager",
    "CatalogNotInitializedError",
    "CatalogSourceNotFoundError",
    "CatalogValidationError",
    "Category",
    "EmptyCatalogError",
    "Entry",
    "RandomSourceError",
    "RateLimitGuard",
    "RateLimitedError",
    "guard",
    "load",
]
