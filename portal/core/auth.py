"""Caller authentication and identity.

Session issuance, organization membership and role claims belong to the
external identity provider. This API only sees its results:

- ``X-API-Key`` guards mutating routes (checked against ``APP_API_KEYS``)
- ``X-User-Id`` / ``X-Organization-Id`` / ``X-User-Role`` carry the
  principal resolved by the identity provider in front of the API
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Header

from portal.core.config import parse_csv, settings
from portal.core.errors import AuthenticationAppError, UnauthenticatedAppError
from portal.core.logging import hash_identifier

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "org_member"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as asserted by the identity provider."""

    user_id: str
    organization_id: str | None = None
    role: str = DEFAULT_ROLE


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Examples:
        >>> parse_api_keys("key1, key2 ,key1")
        {'key1', 'key2'}
        >>> parse_api_keys(None)
        set()
    """
    return set(parse_csv(keys_string))


def validate_api_key(provided_key: str) -> None:
    """Validate that provided API key matches configured keys.

    Raises:
        AuthenticationAppError: If the key is unknown, or if authentication
            is required but no keys are configured.
    """
    if not settings.app.api_key_required:
        return

    valid_keys = parse_api_keys(settings.app.api_keys)

    if not valid_keys:
        logger.error(
            "api_key_validation_failed",
            extra={"reason": "api_keys_not_configured"},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    if provided_key not in valid_keys:
        logger.warning(
            "api_key_validation_failed",
            extra={
                "reason": "invalid_api_key",
                "api_key_hash": hash_identifier(provided_key),
            },
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )


async def verify_api_key(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency enforcing ``X-API-Key`` on protected routes.

    Usage:
        @router.post("/v1/posts", dependencies=[Depends(verify_api_key)])

    Raises:
        AuthenticationAppError: Rendered as 403 by the global handlers.
    """
    if not settings.app.api_key_required:
        return

    if not x_api_key:
        logger.warning("auth.missing_key", extra={"api_key_present": False})
        raise AuthenticationAppError(
            code="missing_api_key",
            message="Missing API key. Provide X-API-Key header.",
        )

    validate_api_key(x_api_key)

    logger.debug("auth.success", extra={"api_key_hash": hash_identifier(x_api_key)})


async def get_principal(
    x_user_id: Annotated[str | None, Header(alias="X-User-Id")] = None,
    x_organization_id: Annotated[str | None, Header(alias="X-Organization-Id")] = None,
    x_user_role: Annotated[str | None, Header(alias="X-User-Role")] = None,
) -> Principal:
    """FastAPI dependency returning the caller resolved by the identity provider.

    Raises:
        UnauthenticatedAppError: No user identity accompanies the request (401).
    """
    if not x_user_id:
        raise UnauthenticatedAppError(code="unauthorized", message="Unauthorized")
    return Principal(
        user_id=x_user_id,
        organization_id=x_organization_id or None,
        role=x_user_role or DEFAULT_ROLE,
    )
