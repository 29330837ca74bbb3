"""OpenAPI customization.

Adds the ``X-API-Key`` security scheme, tag descriptions and documents the
rate limit headers every rate limited operation may return.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {"name": "Posts", "description": "Blog posts, including batch endpoints."},
    {"name": "Projects", "description": "Organization projects, including batch endpoints."},
    {"name": "Access Requests", "description": "Product access requests and their review."},
    {"name": "Payment Methods", "description": "Stored payment processor references per user."},
    {"name": "User Profiles", "description": "User profile records."},
    {"name": "Chat", "description": "Relay to the AI assistant service."},
    {"name": "Health", "description": "Liveness checks."},
]

RATE_LIMIT_HEADERS = {
    "X-RateLimit-Limit": {"description": "Requests allowed per window.", "schema": {"type": "string"}},
    "X-RateLimit-Remaining": {"description": "Requests left in the window.", "schema": {"type": "string"}},
    "X-RateLimit-Reset": {"description": "Window end, epoch milliseconds.", "schema": {"type": "string"}},
}

TOO_MANY_REQUESTS = {
    "description": "Rate limit exceeded",
    "headers": {
        **RATE_LIMIT_HEADERS,
        "Retry-After": {"description": "Seconds until the window resets.", "schema": {"type": "string"}},
    },
    "content": {
        "application/json": {
            "example": {"error": "Too many requests", "status": 429, "resetAt": "2024-01-01T00:01:00.000Z"}
        }
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with security, tags and 429 docs."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {}).setdefault(
            "ApiKeyAuth",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Required on mutating and admin routes.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        tags.extend(tag for tag in TAGS_METADATA if tag["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith("/health"):
                continue
            for operation in methods.values():
                if isinstance(operation, dict):
                    operation.setdefault("responses", {}).setdefault("429", TOO_MANY_REQUESTS)

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
