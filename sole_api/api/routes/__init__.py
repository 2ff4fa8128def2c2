from __future__ import annotations

from sole_api.api.routes.auth import router as auth_router
from sole_api.api.routes.designs import router as designs_router
from sole_api.api.routes.health import router as health_router

__all__ = ["auth_router", "designs_router", "health_router"]
