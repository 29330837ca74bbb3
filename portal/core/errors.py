"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.

The data-access family (``DataAccessError``, ``NotFoundError``,
``ValidationError``) carries an HTTP-style ``status_code`` so route handlers
and the global exception handlers can translate failures into responses
without re-inspecting the error content.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: float
    entity: str
    entity_id: str
    field_errors: dict[str, list[str]]
    upstream_status: int
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class UnauthenticatedAppError(AuthenticationAppError):
    """Raised when a request carries no caller identity at all."""


class UpstreamAppError(AppError):
    """Raised when an external service answers with a failure status."""

    def __init__(
        self,
        code: str,
        message: str,
        details: ErrorDetails | None = None,
        *,
        status_code: int = 502,
    ) -> None:
        super().__init__(code=code, message=message, details=details)
        self.status_code = status_code


class UpstreamTimeoutAppError(UpstreamAppError):
    """Raised when an external service does not answer in time."""

    def __init__(self, message: str = "AI service timeout") -> None:
        super().__init__(code="upstream_timeout", message=message, status_code=504)


class DataAccessError(AppError):
    """Base failure of an entity store operation.

    Attributes:
        status_code: HTTP status a route should answer with.
        original_error: Underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        original_error: BaseException | None = None,
        *,
        code: str = "data_access_error",
        details: ErrorDetails | None = None,
    ) -> None:
        super().__init__(code=code, message=message, details=details)
        self.status_code = status_code
        self.original_error = original_error


class NotFoundError(DataAccessError):
    """Raised by ``get_by_id`` (and friends) when no record matches."""

    def __init__(self, entity_name: str, id: str) -> None:
        super().__init__(
            f"{entity_name} with id {id} not found",
            404,
            code="not_found",
            details={"entity": entity_name, "entity_id": str(id)},
        )
        self.entity_name = entity_name
        self.id = id


class ValidationError(DataAccessError):
    """Raised when a store rejects the submitted data."""

    def __init__(
        self,
        message: str,
        field_errors: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(
            message,
            400,
            code="validation_error",
            details={"field_errors": field_errors} if field_errors else None,
        )
        self.field_errors = field_errors
