"""Relay of chat messages to the external AI microservice.

The assistant itself lives in a separate Python service; this API only
validates the request, attaches the caller's identity and forwards it. Every
call carries an explicit timeout so a stalled upstream cannot hold the
request open indefinitely.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from portal.core.errors import UpstreamAppError, UpstreamTimeoutAppError

logger = logging.getLogger(__name__)

CHAT_PATH = "/chat-new"


class ChatRelayService:
    """Forward chat messages to the AI service.

    Attributes:
        base_url: Root URL of the AI service.
        timeout_seconds: Abort the upstream call after this many seconds.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._client = client

    async def send(
        self,
        message: str,
        *,
        user_id: str,
        organization_id: str | None,
        user_role: str = "org_member",
    ) -> dict[str, Any]:
        """Send one message and return the assistant's JSON answer.

        Args:
            message: The user's message.
            user_id: Caller identity.
            organization_id: Organization whose knowledge base to query.
            user_role: Role claim forwarded to the AI service.

        Returns:
            The AI service's JSON body, unchanged.

        Raises:
            UpstreamTimeoutAppError: The service did not answer in time (504).
            UpstreamAppError: The service answered with an error status or
                could not be reached.
        """
        payload = {
            "message": message,
            "user_id": user_id,
            "organization_id": organization_id,
            "user_role": user_role,
        }
        start = time.perf_counter()

        try:
            if self._client is not None:
                response = await self._client.post(
                    f"{self.base_url}{CHAT_PATH}", json=payload, timeout=self.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(f"{self.base_url}{CHAT_PATH}", json=payload)
        except httpx.TimeoutException as exc:
            logger.warning(
                "chat_relay.timeout",
                extra={"timeout_s": self.timeout_seconds, "organization_id": organization_id},
            )
            raise UpstreamTimeoutAppError() from exc
        except httpx.HTTPError as exc:
            logger.error(
                "chat_relay.transport_error",
                extra={"error_type": type(exc).__name__},
            )
            raise UpstreamAppError(
                code="upstream_unavailable",
                message="AI service is unavailable",
            ) from exc

        duration_ms = (time.perf_counter() - start) * 1000

        if response.is_error:
            logger.error(
                "chat_relay.error_status",
                extra={"upstream_status": response.status_code, "duration_ms": round(duration_ms, 2)},
            )
            raise UpstreamAppError(
                code="upstream_error",
                message="Failed to get response from AI service",
                details={"upstream_status": response.status_code},
                status_code=response.status_code,
            )

        logger.info(
            "chat_relay.completed",
            extra={"duration_ms": round(duration_ms, 2), "organization_id": organization_id},
        )
        return response.json()
