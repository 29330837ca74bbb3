"""Request correlation and access logging.

Every request is bound to a correlation id (taken from the configured
header when the caller sends a usable one, generated otherwise). The id is
kept in a context variable for the log filters, exposed as
``request.state.request_id`` and echoed on the response together with
``X-Request-Duration-ms``. One ``request.completed`` line is logged per
request, including throttled ones.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import logging
import re
import time
import uuid

from fastapi import Request, Response

from portal.core.config import settings
from portal.core.logging import clear_request_id, set_request_id

logger = logging.getLogger(__name__)

# Incoming ids end up in logs and headers; anything else is replaced
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    """Return ``incoming`` when it is a safe correlation id, else a new UUID4."""
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


async def request_id_middleware(request: Request, call_next) -> Response:
    header_name = settings.log.request_id_header
    request_id = resolve_request_id(request.headers.get(header_name))
    request.state.request_id = request_id
    set_request_id(request_id)

    start = time.perf_counter()
    try:
        response: Response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request.completed",
            extra={
                "method": request.method,
                "route": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    return response
