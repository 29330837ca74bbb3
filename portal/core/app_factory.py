"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from portal.adapters.data_access.factory import close_data_access
from portal.api.routes import (
    access_requests_router,
    chat_router,
    health_router,
    payment_methods_router,
    posts_router,
    projects_router,
    user_profiles_router,
)
from portal.core.config import settings
from portal.core.exception_handlers import setup_exception_handlers
from portal.core.logging import configure_logging
from portal.core.middleware import request_id_middleware
from portal.core.openapi import apply_openapi_customizations
from portal.core.rate_limit import rate_limit_middleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Release the HTTP clients of cached entity stores on shutdown."""
    yield
    await close_data_access()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Portal API",
        description=(
            "Backend of the multi-tenant portal: posts, projects, access "
            "requests and the chat assistant relay. Every route is rate "
            "limited per client and path."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )

    # The last registered middleware runs first: request ids are bound
    # before the rate limiter logs its decision.
    app.middleware("http")(rate_limit_middleware)
    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(posts_router, prefix="/v1")
    app.include_router(projects_router, prefix="/v1")
    app.include_router(access_requests_router, prefix="/v1")
    app.include_router(payment_methods_router, prefix="/v1")
    app.include_router(user_profiles_router, prefix="/v1")
    app.include_router(chat_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
