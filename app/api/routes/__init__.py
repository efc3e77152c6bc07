from __future__ import annotations

from app.api.routes.comments import router as comments_router
from app.api.routes.health import router as health_router
from app.api.routes.likes import router as likes_router

__all__ = ["comments_router", "health_router", "likes_router"]
