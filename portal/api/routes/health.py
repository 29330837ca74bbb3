from __future__ import annotations

from fastapi import APIRouter

from portal.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check; exempt from rate limiting.

    Also reports which entity backend is active and whether throttling is on,
    so a misconfigured deployment is visible from this endpoint alone.
    """

    return {
        "status": "ok",
        "backend_mode": settings.app.backend_mode,
        "rate_limit_enabled": settings.app.rate_limit_enabled,
    }
