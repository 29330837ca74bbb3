"""Entity stores backed by the remote data API (``backend_mode=http``).

Each store maps the CRUD verbs onto REST calls against
``{base_url}/{resource}`` and converts transport/HTTP failures into the
data-access error taxonomy:

- 404 -> ``NotFoundError``
- 400 / 422 -> ``ValidationError`` (with ``field_errors`` when provided)
- any other failure -> ``DataAccessError`` carrying the upstream status
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, TypeVar
from urllib.parse import quote

import httpx
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from portal.adapters.data_access.base import AbstractDataAccess
from portal.core.errors import DataAccessError, NotFoundError, ValidationError
from portal.schemas.access_request import AccessRequest, AccessRequestStatus
from portal.schemas.payment_method import PaymentMethod
from portal.schemas.post import Post
from portal.schemas.project import Project
from portal.schemas.user_profile import UserProfile

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpApiDataAccess(AbstractDataAccess[ModelT], Generic[ModelT]):
    """Generic REST-backed store.

    Attributes:
        model: Pydantic model used to parse response bodies.
        resource: Path segment of the collection (e.g. ``"post"``).
    """

    model: type[ModelT]
    resource: str

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            base_url: Root URL of the data API.
            timeout_seconds: Per-request timeout.
            client: Optional pre-built client (tests inject a MockTransport).
        """
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
        )

    @property
    def collection_path(self) -> str:
        return f"/{self.resource}"

    def item_path(self, id: str) -> str:
        return f"{self.collection_path}/{path_segment(id)}"

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        entity_id: str | None = None,
        **kwargs: Any,
    ) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(
                "data_api.transport_error",
                extra={"method": method, "path": path, "error_type": type(exc).__name__},
            )
            raise DataAccessError(
                f"{self.entity_name} request failed: {exc}", 502, exc
            ) from exc

        if response.status_code == 404:
            raise NotFoundError(self.entity_name, entity_id or path)

        if response.status_code in (400, 422):
            body = _safe_json(response)
            field_errors = body.get("field_errors")
            raise ValidationError(
                body.get("error") or f"Invalid {self.entity_name.lower()} data",
                field_errors=field_errors if isinstance(field_errors, dict) else None,
            )

        if response.is_error:
            logger.warning(
                "data_api.error_status",
                extra={"method": method, "path": path, "upstream_status": response.status_code},
            )
            raise DataAccessError(
                f"{self.entity_name} request failed with status {response.status_code}",
                response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _parse(self, payload: Any) -> ModelT:
        return self.model.model_validate(payload)

    async def get_by_id(self, id: str) -> ModelT:
        return self._parse(await self._request("GET", self.item_path(id), entity_id=id))

    async def get_all(self) -> list[ModelT]:
        payload = await self._request("GET", self.collection_path)
        return [self._parse(item) for item in payload or []]

    async def create(self, data: Mapping[str, Any]) -> ModelT:
        payload = await self._request("POST", self.collection_path, json=jsonable_encoder(dict(data)))
        return self._parse(payload)

    async def update(self, id: str, data: Mapping[str, Any]) -> ModelT:
        payload = await self._request("PUT", self.item_path(id), entity_id=id, json=jsonable_encoder(dict(data)))
        return self._parse(payload)

    async def delete(self, id: str) -> None:
        await self._request("DELETE", self.item_path(id), entity_id=id)


def path_segment(value: str) -> str:
    """Percent-encode ``value`` so it stays a single URL path segment."""
    return quote(str(value), safe="")


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class PostHttpDataAccess(HttpApiDataAccess[Post]):
    model = Post
    resource = "post"
    entity_name = "Post"

    async def get_by_slug(self, slug: str) -> Post:
        return self._parse(
            await self._request("GET", f"{self.collection_path}/slug/{path_segment(slug)}", entity_id=slug)
        )

    async def get_published(self) -> list[Post]:
        payload = await self._request("GET", f"{self.collection_path}/published")
        return [self._parse(item) for item in payload or []]


class ProjectHttpDataAccess(HttpApiDataAccess[Project]):
    model = Project
    resource = "project"
    entity_name = "Project"


class PaymentMethodHttpDataAccess(HttpApiDataAccess[PaymentMethod]):
    model = PaymentMethod
    resource = "payment-method"
    entity_name = "Payment method"

    async def get_by_user(self, user_id: str) -> list[PaymentMethod]:
        payload = await self._request("GET", self.collection_path, params={"user_id": user_id})
        return [self._parse(item) for item in payload or []]


class UserProfileHttpDataAccess(HttpApiDataAccess[UserProfile]):
    model = UserProfile
    resource = "user-profile"
    entity_name = "User profile"


class AccessRequestHttpDataAccess(HttpApiDataAccess[AccessRequest]):
    model = AccessRequest
    resource = "access-request"
    entity_name = "Access request"

    async def list_requests(
        self,
        status: AccessRequestStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[AccessRequest]:
        params: dict[str, Any] = {"offset": offset}
        if status is not None:
            params["status"] = status.value
        if limit is not None:
            params["limit"] = limit
        payload = await self._request("GET", self.collection_path, params=params)
        return [self._parse(item) for item in payload or []]

    async def _review(
        self, id: str, action: str, admin_notes: str | None, reviewed_by: str | None
    ) -> AccessRequest:
        payload = await self._request(
            "POST",
            f"{self.item_path(id)}/{action}",
            entity_id=id,
            json={"admin_notes": admin_notes, "reviewed_by": reviewed_by},
        )
        return self._parse(payload)

    async def approve(
        self, id: str, admin_notes: str | None = None, reviewed_by: str | None = None
    ) -> AccessRequest:
        return await self._review(id, "approve", admin_notes, reviewed_by)

    async def reject(
        self, id: str, admin_notes: str | None = None, reviewed_by: str | None = None
    ) -> AccessRequest:
        return await self._review(id, "reject", admin_notes, reviewed_by)
