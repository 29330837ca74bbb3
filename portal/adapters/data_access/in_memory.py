"""Dict-backed entity stores.

Used for local development, demos and tests (``backend_mode=memory``). The
records are pydantic models; ``create`` and ``update`` validate the merged
payload through the model so invalid data surfaces as ``ValidationError``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Generic, Iterable, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from portal.adapters.data_access.base import AbstractDataAccess
from portal.core.errors import NotFoundError, ValidationError
from portal.schemas.access_request import AccessRequest, AccessRequestStatus
from portal.schemas.payment_method import PaymentMethod
from portal.schemas.post import Post
from portal.schemas.project import Project
from portal.schemas.user_profile import UserProfile

ModelT = TypeVar("ModelT", bound=BaseModel)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def field_errors_from(exc: PydanticValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by dotted field path."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "__root__"
        errors.setdefault(field, []).append(error["msg"])
    return errors


class InMemoryDataAccess(AbstractDataAccess[ModelT], Generic[ModelT]):
    """Generic store keeping records in insertion order.

    Attributes:
        model: Pydantic model describing a record.
        entity_name: Name used in ``NotFoundError`` messages.
    """

    model: type[ModelT]
    id_prefix: str = ""
    created_field: str | None = "created_at"
    updated_field: str | None = "updated_at"
    immutable_fields: frozenset[str] = frozenset({"id"})

    def __init__(self, seed: Iterable[ModelT] | None = None) -> None:
        self._records: dict[str, ModelT] = {}
        for record in seed or ():
            self._records[str(getattr(record, "id"))] = record

    def _new_id(self) -> str:
        return f"{self.id_prefix}{uuid.uuid4().hex[:12]}"

    def _validate(self, payload: Mapping[str, Any]) -> ModelT:
        try:
            return self.model.model_validate(dict(payload))
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Invalid {self.entity_name.lower()} data",
                field_errors=field_errors_from(exc),
            ) from exc

    async def get_by_id(self, id: str) -> ModelT:
        record = self._records.get(id)
        if record is None:
            raise NotFoundError(self.entity_name, id)
        return record

    async def get_all(self) -> list[ModelT]:
        return list(self._records.values())

    async def get_all_by_ids(self, ids: list[str]) -> list[ModelT]:
        """Return the records that exist among ``ids``; unknown ids are skipped."""
        return [self._records[id] for id in ids if id in self._records]

    async def create(self, data: Mapping[str, Any]) -> ModelT:
        now = utc_now()
        payload = {k: v for k, v in data.items() if k not in self.immutable_fields}
        payload["id"] = self._new_id()
        if self.created_field:
            payload.setdefault(self.created_field, now)
        if self.updated_field:
            payload[self.updated_field] = now

        record = self._validate(payload)
        self._records[str(getattr(record, "id"))] = record
        return record

    async def update(self, id: str, data: Mapping[str, Any]) -> ModelT:
        current = await self.get_by_id(id)
        payload = current.model_dump()
        payload.update({k: v for k, v in data.items() if k not in self.immutable_fields})
        if self.updated_field:
            payload[self.updated_field] = utc_now()
        record = self._validate(payload)
        self._records[id] = record
        return record

    async def delete(self, id: str) -> None:
        """Remove a record; deleting an unknown id is a no-op."""
        self._records.pop(id, None)


class PostInMemoryDataAccess(InMemoryDataAccess[Post]):
    model = Post
    entity_name = "Post"
    id_prefix = "post_"

    async def create(self, data: Mapping[str, Any]) -> Post:
        payload = dict(data)
        if not payload.get("slug"):
            payload["slug"] = f"post-{uuid.uuid4().hex[:8]}"
        if payload.get("is_published") and not payload.get("published_at"):
            payload["published_at"] = utc_now()
        return await super().create(payload)

    async def get_by_slug(self, slug: str) -> Post:
        for post in self._records.values():
            if post.slug == slug:
                return post
        raise NotFoundError(self.entity_name, slug)

    async def get_published(self) -> list[Post]:
        published = [post for post in self._records.values() if post.is_published]
        return sorted(
            published,
            key=lambda post: post.published_at or post.created_at,
            reverse=True,
        )


class ProjectInMemoryDataAccess(InMemoryDataAccess[Project]):
    model = Project
    entity_name = "Project"
    id_prefix = "proj_"


class PaymentMethodInMemoryDataAccess(InMemoryDataAccess[PaymentMethod]):
    model = PaymentMethod
    entity_name = "Payment method"
    id_prefix = "pm_"

    async def get_by_user(self, user_id: str) -> list[PaymentMethod]:
        return [pm for pm in self._records.values() if pm.user_id == user_id]


class UserProfileInMemoryDataAccess(InMemoryDataAccess[UserProfile]):
    model = UserProfile
    entity_name = "User profile"
    id_prefix = "user_"


class AccessRequestInMemoryDataAccess(InMemoryDataAccess[AccessRequest]):
    """Access requests, with the review workflow on top of CRUD."""

    model = AccessRequest
    entity_name = "Access request"
    created_field = "submitted_at"
    updated_field = None

    async def create(self, data: Mapping[str, Any]) -> AccessRequest:
        payload = dict(data)
        # New requests always enter the review queue
        payload["status"] = AccessRequestStatus.PENDING
        for field in ("reviewed_at", "reviewed_by", "admin_notes"):
            payload.pop(field, None)
        return await super().create(payload)

    async def list_requests(
        self,
        status: AccessRequestStatus | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[AccessRequest]:
        records = sorted(self._records.values(), key=lambda r: r.submitted_at, reverse=True)
        if status is not None:
            records = [r for r in records if r.status == status]
        end = None if limit is None else offset + limit
        return records[offset:end]

    async def _review(
        self,
        id: str,
        status: AccessRequestStatus,
        admin_notes: str | None,
        reviewed_by: str | None,
    ) -> AccessRequest:
        return await self.update(
            id,
            {
                "status": status,
                "reviewed_at": utc_now(),
                "reviewed_by": reviewed_by,
                "admin_notes": admin_notes,
            },
        )

    async def approve(
        self, id: str, admin_notes: str | None = None, reviewed_by: str | None = None
    ) -> AccessRequest:
        return await self._review(id, AccessRequestStatus.APPROVED, admin_notes, reviewed_by)

    async def reject(
        self, id: str, admin_notes: str | None = None, reviewed_by: str | None = None
    ) -> AccessRequest:
        return await self._review(id, AccessRequestStatus.REJECTED, admin_notes, reviewed_by)
