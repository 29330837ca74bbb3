from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from portal.core.auth import Principal, get_principal
from portal.core.config import settings
from portal.core.errors import ValidationAppError
from portal.schemas.chat import ChatRequest
from portal.services.chat_relay import ChatRelayService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


def get_chat_relay() -> ChatRelayService:
    return ChatRelayService(
        settings.services.chat_service_url,
        timeout_seconds=settings.services.chat_timeout_seconds,
    )


@router.post("/chat")
async def chat(
    body: ChatRequest,
    principal: Annotated[Principal, Depends(get_principal)],
    relay: Annotated[ChatRelayService, Depends(get_chat_relay)],
) -> dict[str, Any]:
    """Relay a chat message to the AI service on behalf of the caller.

    Callers without an organization fall back to
    ``SERVICES_DEFAULT_ORGANIZATION_ID`` (global admins querying the company
    knowledge base).

    Raises:
        ValidationAppError: No organization context is available (400).
        UpstreamTimeoutAppError: The AI service timed out (504).
        UpstreamAppError: The AI service failed.
    """
    organization_id = principal.organization_id or settings.services.default_organization_id
    if not organization_id:
        raise ValidationAppError(
            code="no_organization_context",
            message="No organization context",
        )

    return await relay.send(
        body.message,
        user_id=principal.user_id,
        organization_id=organization_id,
        user_role=principal.role,
    )
