from __future__ import annotations

from useragent_service.api.routes.health import router as health_router
from useragent_service.api.routes.user_agents import router as user_agents_router

__all__ = ["health_router", "user_agents_router"]
