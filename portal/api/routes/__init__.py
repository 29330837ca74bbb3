from __future__ import annotations

from portal.api.routes.access_requests import router as access_requests_router
from portal.api.routes.chat import router as chat_router
from portal.api.routes.health import router as health_router
from portal.api.routes.payment_methods import router as payment_methods_router
from portal.api.routes.posts import router as posts_router
from portal.api.routes.projects import router as projects_router
from portal.api.routes.user_profiles import router as user_profiles_router

__all__ = [
    "access_requests_router",
    "chat_router",
    "health_router",
    "payment_methods_router",
    "posts_router",
    "projects_router",
    "user_profiles_router",
]
