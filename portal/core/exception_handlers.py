"""Global exception handlers for consistent error responses.

Every error leaves the API as::

    {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

Status codes:
- DataAccessError family -> its own ``status_code`` (404, 400, 500, ...)
- UpstreamAppError -> the upstream status (502 / 504 by default)
- ValidationAppError -> 400
- UnauthenticatedAppError -> 401
- AuthenticationAppError -> 403
- any other AppError -> 400
- unexpected Exception -> generic 500 (no internals leaked)
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from portal.core.errors import (
    AppError,
    AuthenticationAppError,
    DataAccessError,
    UnauthenticatedAppError,
    UpstreamAppError,
)
from portal.core.logging import get_request_id

logger = logging.getLogger(__name__)


def status_code_for(exc: AppError) -> int:
    """Map an application error to the HTTP status it should produce."""
    if isinstance(exc, (DataAccessError, UpstreamAppError)):
        return exc.status_code
    if isinstance(exc, UnauthenticatedAppError):
        return 401
    if isinstance(exc, AuthenticationAppError):
        return 403
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError (or subclass) with its mapped status code."""
    status_code = status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_msg": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(status_code=status_code, content={"error": error_content})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors; logs the cause, returns a generic body."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register the handlers on a FastAPI app (safe to call more than once)."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
