"""Factory functions selecting the entity store backend.

The backend is chosen by ``settings.app.backend_mode``:
- ``memory``: dict-backed stores (local development, demos, tests)
- ``http``: stores calling the remote data API at ``services.data_api_base_url``

One instance per entity is cached for the process lifetime so in-memory data
survives across requests. ``reset_data_access()`` drops the cache;
``close_data_access()`` also closes HTTP clients and runs at app shutdown.
"""

from __future__ import annotations

from typing import Callable

from portal.adapters.data_access.http_api import (
    AccessRequestHttpDataAccess,
    PaymentMethodHttpDataAccess,
    PostHttpDataAccess,
    ProjectHttpDataAccess,
    UserProfileHttpDataAccess,
)
from portal.adapters.data_access.in_memory import (
    AccessRequestInMemoryDataAccess,
    PaymentMethodInMemoryDataAccess,
    PostInMemoryDataAccess,
    ProjectInMemoryDataAccess,
    UserProfileInMemoryDataAccess,
)
from portal.core.config import settings
from portal.core.errors import ValidationAppError

SUPPORTED_BACKENDS = ("memory", "http")

_instances: dict[str, object] = {}


def _build(name: str, memory_factory: Callable[[], object], http_cls: type) -> object:
    if name in _instances:
        return _instances[name]

    mode = settings.app.backend_mode.lower()
    if mode == "memory":
        instance = memory_factory()
    elif mode == "http":
        instance = http_cls(
            settings.services.data_api_base_url,
            timeout_seconds=settings.services.request_timeout_seconds,
        )
    else:
        raise ValidationAppError(
            code="unknown_backend_mode",
            message=(
                f"Unknown backend mode: '{mode}'. "
                f"Supported modes: {', '.join(SUPPORTED_BACKENDS)}"
            ),
        )

    _instances[name] = instance
    return instance


def get_post_data_access() -> PostInMemoryDataAccess | PostHttpDataAccess:
    return _build("post", PostInMemoryDataAccess, PostHttpDataAccess)  # type: ignore[return-value]


def get_project_data_access() -> ProjectInMemoryDataAccess | ProjectHttpDataAccess:
    return _build("project", ProjectInMemoryDataAccess, ProjectHttpDataAccess)  # type: ignore[return-value]


def get_access_request_data_access() -> (
    AccessRequestInMemoryDataAccess | AccessRequestHttpDataAccess
):
    return _build(  # type: ignore[return-value]
        "access_request", AccessRequestInMemoryDataAccess, AccessRequestHttpDataAccess
    )


def get_payment_method_data_access() -> (
    PaymentMethodInMemoryDataAccess | PaymentMethodHttpDataAccess
):
    return _build(  # type: ignore[return-value]
        "payment_method", PaymentMethodInMemoryDataAccess, PaymentMethodHttpDataAccess
    )


def get_user_profile_data_access() -> (
    UserProfileInMemoryDataAccess | UserProfileHttpDataAccess
):
    return _build(  # type: ignore[return-value]
        "user_profile", UserProfileInMemoryDataAccess, UserProfileHttpDataAccess
    )


def reset_data_access() -> None:
    """Forget cached stores so the next call rebuilds them from settings."""
    _instances.clear()


async def close_data_access() -> None:
    """Close network clients held by cached stores, then forget the stores."""
    for instance in list(_instances.values()):
        aclose = getattr(instance, "aclose", None)
        if callable(aclose):
            await aclose()
    _instances.clear()
