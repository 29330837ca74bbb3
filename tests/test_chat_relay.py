"""Tests for the chat relay service and the /v1/chat route."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from portal.api.routes.chat import get_chat_relay
from portal.core.errors import UpstreamAppError, UpstreamTimeoutAppError
from portal.services.chat_relay import ChatRelayService

AI_URL = "http://ai.test"


def _relay(handler) -> ChatRelayService:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatRelayService(AI_URL, timeout_seconds=1, client=client)


class TestChatRelayService:
    @pytest.mark.asyncio
    async def test_forwards_message_with_identity(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"response": "hi there"})

        result = await _relay(handler).send(
            "hello", user_id="u1", organization_id="org-1", user_role="org_admin"
        )

        assert result == {"response": "hi there"}
        assert str(seen[0].url) == f"{AI_URL}/chat-new"
        assert json.loads(seen[0].content) == {
            "message": "hello",
            "user_id": "u1",
            "organization_id": "org-1",
            "user_role": "org_admin",
        }

    @pytest.mark.asyncio
    async def test_timeout_maps_to_504(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(UpstreamTimeoutAppError) as exc_info:
            await _relay(handler).send("hello", user_id="u1", organization_id="org-1")

        assert exc_info.value.status_code == 504
        assert exc_info.value.message == "AI service timeout"

    @pytest.mark.asyncio
    async def test_error_status_is_propagated(self):
        relay = _relay(lambda request: httpx.Response(503, json={"detail": "busy"}))

        with pytest.raises(UpstreamAppError) as exc_info:
            await relay.send("hello", user_id="u1", organization_id="org-1")

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Failed to get response from AI service"

    @pytest.mark.asyncio
    async def test_unreachable_service_is_bad_gateway(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamAppError) as exc_info:
            await _relay(handler).send("hello", user_id="u1", organization_id="org-1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.code == "upstream_unavailable"


class TestChatRoute:
    @pytest.fixture
    def relay(self, app):
        relay = AsyncMock(spec=ChatRelayService)
        relay.send.return_value = {"response": "ok"}
        app.dependency_overrides[get_chat_relay] = lambda: relay
        yield relay
        app.dependency_overrides.clear()

    def test_requires_user_identity(self, client, relay):
        response = client.post("/v1/chat", json={"message": "hello"})

        assert response.status_code == 401
        relay.send.assert_not_called()

    def test_relays_with_principal(self, client, relay):
        response = client.post(
            "/v1/chat",
            json={"message": "hello"},
            headers={"X-User-Id": "u1", "X-Organization-Id": "org-1"},
        )

        assert response.status_code == 200
        assert response.json() == {"response": "ok"}
        relay.send.assert_awaited_once_with(
            "hello", user_id="u1", organization_id="org-1", user_role="org_member"
        )

    def test_falls_back_to_default_organization(self, client, relay, monkeypatch):
        from portal.core.config import settings

        monkeypatch.setattr(settings.services, "default_organization_id", "org-default")

        response = client.post("/v1/chat", json={"message": "hello"}, headers={"X-User-Id": "u1"})

        assert response.status_code == 200
        assert relay.send.await_args.kwargs["organization_id"] == "org-default"

    def test_no_organization_context_is_400(self, client, relay, monkeypatch):
        from portal.core.config import settings

        monkeypatch.setattr(settings.services, "default_organization_id", None)

        response = client.post("/v1/chat", json={"message": "hello"}, headers={"X-User-Id": "u1"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "no_organization_context"

    def test_empty_message_rejected(self, client, relay):
        response = client.post("/v1/chat", json={"message": ""}, headers={"X-User-Id": "u1"})

        assert response.status_code == 422

    def test_upstream_timeout_is_504(self, client, relay):
        relay.send.side_effect = UpstreamTimeoutAppError()

        response = client.post(
            "/v1/chat",
            json={"message": "hello"},
            headers={"X-User-Id": "u1", "X-Organization-Id": "org-1"},
        )

        assert response.status_code == 504
        assert response.json()["error"]["message"] == "AI service timeout"
