"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from fastapi import FastAPI

from app.api.routes import comments_router, health_router, likes_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Post Interactions API",
        description=(
            "Likes and comments on posts. Every endpoint except /health needs a "
            "session token (Bearer header or session cookie). Like and unlike "
            "are rate limited per client IP."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(likes_router, prefix="/api")
    app.include_router(comments_router, prefix="/api")
    app.include_router(health_router)

    # OpenAPI customizations (security schemes, tags, exemptions)
    apply_openapi_customizations(app)

    return app
