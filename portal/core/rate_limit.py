"""Rate limiting for the HTTP layer.

This module wires the rate limiting adapter into request handling.

Strategy:
- One fixed-window budget per (client, route path) pair.
- The client is identified by ``X-Forwarded-For``, then ``X-Real-IP``, then
  the transport peer address, then the literal ``"unknown"``.
- ``with_rate_limit`` decorates any ``async (request, ...) -> Response``
  handler; ``rate_limit_middleware`` applies it to every request that is not
  on an exempt path.
- Throttling is a response, not an exception: a blocked request gets a 429
  JSON body and the wrapped handler is never called.
"""

from __future__ import annotations

import functools
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from portal.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from portal.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter, epoch_ms
from portal.core.config import parse_csv, settings
from portal.core.errors import AppError
from portal.core.exception_handlers import app_error_handler, general_exception_handler
from portal.core.logging import hash_identifier

logger = logging.getLogger(__name__)

RouteHandler = Callable[..., Awaitable[Response]]

UNKNOWN_CLIENT = "unknown"

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, int | None] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_window_ms,
        settings.app.rate_limit_max_requests,
        settings.app.rate_limit_max_keys,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemoryFixedWindowRateLimiter(
            window_ms=settings.app.rate_limit_window_ms,
            max_requests=settings.app.rate_limit_max_requests,
            max_keys=settings.app.rate_limit_max_keys,
        )
        _limiter_config = config

    return _limiter


def reset_rate_limiter() -> None:
    """Drop the shared limiter; the next request starts with empty windows."""

    global _limiter, _limiter_config
    _limiter = None
    _limiter_config = None


def get_client_identifier(request: Request) -> str:
    """Best-effort client identity for rate limiting.

    Forwarded headers are client-supplied and therefore spoofable; they are
    only consulted when ``rate_limit_trust_proxy_headers`` is enabled.
    """

    if settings.app.rate_limit_trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop
        real_ip = request.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


def build_rate_limit_key(request: Request) -> str:
    return f"{get_client_identifier(request)}:{request.url.path}"


def _rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_time),
    }


def too_many_requests_response(result: RateLimitResult, now_ms: int) -> JSONResponse:
    """Build the 429 answer for a throttled request.

    Args:
        result: Blocked decision from the limiter.
        now_ms: Current time in epoch milliseconds, for ``Retry-After``.

    Returns:
        JSONResponse carrying ``error``, ``status`` and ``resetAt`` plus the
        standard rate limit headers.
    """

    reset_at = datetime.fromtimestamp(result.reset_time / 1000, tz=timezone.utc)
    headers = _rate_limit_headers(result)
    headers["X-RateLimit-Remaining"] = "0"
    headers["Retry-After"] = str(result.retry_after_seconds(now_ms))

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": "Too many requests",
            "status": status.HTTP_429_TOO_MANY_REQUESTS,
            "resetAt": reset_at.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        },
        headers=headers,
    )


def with_rate_limit(
    handler: RouteHandler,
    *,
    limiter: AbstractRateLimiter | None = None,
    clock: Callable[[], int] = epoch_ms,
) -> RouteHandler:
    """Wrap ``handler`` so each call is counted against the rate limiter.

    Args:
        handler: Coroutine taking the request first and returning a Response.
        limiter: Limiter to consult; defaults to the process-wide instance.
        clock: Time source (epoch ms) used to compute ``Retry-After``.

    Returns:
        A coroutine with the same call signature. When the limiter refuses the
        request the handler is skipped and a 429 response is returned; when it
        allows it, the handler's response is returned with ``X-RateLimit-*``
        headers added and its status and body untouched. A handler that
        raises is rendered through the global error handlers so its error
        response carries the same headers.

    Usage:
        app.add_api_route("/v1/chat", with_rate_limit(chat_endpoint))
    """

    @functools.wraps(handler)
    async def wrapper(request: Request, *args: Any, **kwargs: Any) -> Response:
        active_limiter = limiter if limiter is not None else get_rate_limiter()
        key = build_rate_limit_key(request)
        result = active_limiter.check(key)

        log_extra = {
            "key_hash": hash_identifier(key),
            "route": request.url.path,
            "limit": result.limit,
            "remaining": result.remaining,
            "reset_time": result.reset_time,
        }

        if not result.success:
            now = clock()
            logger.warning(
                "rate_limit.exceeded",
                extra={**log_extra, "retry_after_s": result.retry_after_seconds(now)},
            )
            return too_many_requests_response(result, now)

        logger.debug("rate_limit.allowed", extra=log_extra)

        try:
            response = await handler(request, *args, **kwargs)
        except AppError as exc:
            response = await app_error_handler(request, exc)
        except Exception as exc:
            response = await general_exception_handler(request, exc)
        response.headers.update(_rate_limit_headers(result))
        return response

    return wrapper


def is_exempt_path(path: str) -> bool:
    return path in parse_csv(settings.app.rate_limit_exempt_paths)


async def rate_limit_middleware(request: Request, call_next) -> Response:
    """HTTP middleware applying ``with_rate_limit`` to every inbound request.

    Registered in the app factory after the request-id middleware so that
    throttling decisions are logged with the request's correlation id.
    """

    if not settings.app.rate_limit_enabled or is_exempt_path(request.url.path):
        return await call_next(request)

    return await with_rate_limit(call_next)(request)
