"""Application factory for the FastAPI app.

Centralizes app construction (metadata, lifespan, middleware, handlers,
routers) so tests can build isolated apps with their own catalogs.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from useragent_service.adapters.audit.base import AbstractSelectionRecorder
from useragent_service.adapters.audit.factory import create_selection_recorder
from useragent_service.api.routes import health_router, user_agents_router
from useragent_service.core.config import CatalogSettings, settings
from useragent_service.core.errors import CatalogConstructionError
from useragent_service.core.exception_handlers import setup_exception_handlers
from useragent_service.core.logging import configure_logging
from useragent_service.core.middleware import request_id_middleware
from useragent_service.core.openapi import apply_openapi_customizations
from useragent_service.services.catalog import CatalogManager, default_sources
from useragent_service.services.selection_service import SelectionService

logger = logging.getLogger(__name__)


def build_catalog_manager(catalog_settings: CatalogSettings | None = None) -> CatalogManager:
    """Load the catalogs named in settings, falling back to the packaged ones.

    Raises:
        CatalogConstructionError: If either catalog is missing or invalid.
    """
    cfg = catalog_settings or settings.catalog
    packaged_desktop, packaged_mobile = default_sources()

    return CatalogManager.load(
        cfg.desktop_file if cfg.desktop_file is not None else packaged_desktop,
        cfg.mobile_file if cfg.mobile_file is not None else packaged_mobile,
    )


def create_app(
    *,
    manager: CatalogManager | None = None,
    recorder: AbstractSelectionRecorder | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        manager: Prebuilt catalog manager; loaded from settings at startup
            when omitted.
        recorder: Audit recorder; chosen from settings when omitted.

    Returns:
        Configured FastAPI app. Startup fails if the catalogs cannot be
        loaded, so the server never serves without valid data.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            catalog = manager or build_catalog_manager()
        except CatalogConstructionError as exc:
            logger.critical(
                "startup.catalog_load_failed",
                extra={"error_code": exc.code, "error_message": exc.message},
            )
            raise

        app.state.selection_service = SelectionService(
            catalog,
            recorder if recorder is not None else create_selection_recorder(),
        )
        logger.info(
            "startup.complete",
            extra={"catalogs": catalog.sizes(), "app_env": settings.app_env},
        )
        yield

    app = FastAPI(
        title="User Agent Service",
        description=(
            "Serves realistic browser user-agent strings drawn from curated "
            "desktop and mobile catalogs using a cryptographically secure "
            "random source. Requests are rate limited per client IP."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(user_agents_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
