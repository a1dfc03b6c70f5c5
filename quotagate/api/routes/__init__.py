from __future__ import annotations

from quotagate.api.routes.health import router as health_router
from quotagate.api.routes.root import router as root_router
from quotagate.api.routes.tokens import router as token_router

__all__ = ["health_router", "root_router", "token_router"]
