"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- Session security schemes (bearer token or session cookie) with per-path
  overrides

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from app.core.config import settings


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and security.

    - Injects components.securitySchemes for the session token, sent either
      as ``Authorization: Bearer`` or as the session cookie
    - Marks all operations as requiring a session by default, then exempts
      health endpoints by setting ``security: []``
    - Adds tags metadata if not present
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "SessionBearer",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token in the Authorization header.",
            },
        )
        security_schemes.setdefault(
            "SessionCookie",
            {
                "type": "apiKey",
                "in": "cookie",
                "name": settings.app.session_cookie_name,
                "description": "Session token in the session cookie.",
            },
        )

        # Either scheme satisfies the requirement
        schema.setdefault("security", [{"SessionBearer": []}, {"SessionCookie": []}])

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Likes", "description": "Read, like and unlike posts."},
            {"name": "Comments", "description": "Create and delete comments."},
            {"name": "Health", "description": "Liveness check."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for path, methods in paths.items():
            if path.endswith("/health"):
                for method_obj in methods.values():
                    if isinstance(method_obj, dict):
                        method_obj["security"] = []

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
