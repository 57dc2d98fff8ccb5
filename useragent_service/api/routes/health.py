from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from useragent_service.api.dependencies import get_catalog_manager
from useragent_service.services.catalog import CatalogManager

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(manager: CatalogManager = Depends(get_catalog_manager)) -> dict:
    """Health check endpoint.

    Not rate limited. Reports catalog sizes so a load balancer can tell the
    service started with data behind it.

    Returns:
        dict: ``status``, current UTC ``time`` and per-catalog ``catalogs`` counts.
    """

    return {
        "status": "healthy",
        "time": datetime.now(timezone.utc).isoformat(),
        "catalogs": manager.sizes(),
    }
