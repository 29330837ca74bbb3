"""Tests for the dict-backed entity stores."""

from __future__ import annotations

import pytest

from portal.adapters.data_access.base import supports
from portal.adapters.data_access.in_memory import (
    AccessRequestInMemoryDataAccess,
    PaymentMethodInMemoryDataAccess,
    PostInMemoryDataAccess,
    ProjectInMemoryDataAccess,
    UserProfileInMemoryDataAccess,
)
from portal.core.errors import NotFoundError, ValidationError
from portal.schemas.access_request import AccessRequestStatus
from portal.schemas.project import ProjectStatus

ACCESS_REQUEST = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "company_name": "Analytical Engines",
    "job_title": "CTO",
    "use_case": "Automating our reporting workflows",
    "team_size": "6-25",
    "industry": "Software",
    "expected_start_date": "2026-11-01",
}


class TestGenericContract:
    @pytest.mark.asyncio
    async def test_get_by_id_raises_not_found(self):
        store = ProjectInMemoryDataAccess()

        with pytest.raises(NotFoundError) as exc_info:
            await store.get_by_id("nope")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Project with id nope not found"

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_timestamps(self):
        store = ProjectInMemoryDataAccess()

        project = await store.create({"name": "Launch", "user_id": "u1"})

        assert project.id.startswith("proj_")
        assert project.status is ProjectStatus.PENDING
        assert project.created_at == project.updated_at
        assert await store.get_by_id(project.id) == project

    @pytest.mark.asyncio
    async def test_create_ignores_client_supplied_id(self):
        store = ProjectInMemoryDataAccess()

        project = await store.create({"id": "chosen", "name": "Launch", "user_id": "u1"})

        assert project.id != "chosen"

    @pytest.mark.asyncio
    async def test_invalid_create_raises_validation_error(self):
        store = ProjectInMemoryDataAccess()

        with pytest.raises(ValidationError) as exc_info:
            await store.create({"name": ""})

        assert exc_info.value.status_code == 400
        assert "user_id" in exc_info.value.field_errors
        assert await store.get_all() == []

    @pytest.mark.asyncio
    async def test_update_merges_fields(self):
        store = ProjectInMemoryDataAccess()
        project = await store.create({"name": "Launch", "user_id": "u1"})

        updated = await store.update(project.id, {"status": "active", "id": "other"})

        assert updated.id == project.id
        assert updated.name == "Launch"
        assert updated.status is ProjectStatus.ACTIVE
        assert updated.updated_at >= project.updated_at

    @pytest.mark.asyncio
    async def test_update_unknown_id_raises_not_found(self):
        store = ProjectInMemoryDataAccess()

        with pytest.raises(NotFoundError):
            await store.update("nope", {"name": "x"})

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self):
        store = ProjectInMemoryDataAccess()
        project = await store.create({"name": "Launch", "user_id": "u1"})

        await store.delete(project.id)
        await store.delete(project.id)

        assert await store.get_all() == []

    @pytest.mark.asyncio
    async def test_get_all_by_ids_skips_unknown(self):
        store = ProjectInMemoryDataAccess()
        first = await store.create({"name": "One", "user_id": "u1"})

        found = await store.get_all_by_ids([first.id, "nope"])

        assert supports(store, "get_all_by_ids")
        assert not supports(store, "batch_create")
        assert found == [first]


class TestPosts:
    @pytest.mark.asyncio
    async def test_slug_generated_when_missing(self):
        store = PostInMemoryDataAccess()

        post = await store.create({"title": "Hello", "content": "World"})

        assert post.slug.startswith("post-")
        assert await store.get_by_slug(post.slug) == post

    @pytest.mark.asyncio
    async def test_unknown_slug_raises_not_found(self):
        store = PostInMemoryDataAccess()

        with pytest.raises(NotFoundError):
            await store.get_by_slug("missing")

    @pytest.mark.asyncio
    async def test_published_posts_only(self):
        store = PostInMemoryDataAccess()
        draft = await store.create({"title": "Draft", "content": "..."})
        live = await store.create({"title": "Live", "content": "...", "is_published": True})

        published = await store.get_published()

        assert [post.id for post in published] == [live.id]
        assert live.published_at is not None
        assert draft.published_at is None


class TestAccessRequests:
    @pytest.mark.asyncio
    async def test_new_requests_are_pending(self):
        store = AccessRequestInMemoryDataAccess()

        request = await store.create({**ACCESS_REQUEST, "status": "approved"})

        assert request.status is AccessRequestStatus.PENDING
        assert request.reviewed_at is None

    @pytest.mark.asyncio
    async def test_approve_records_review(self):
        store = AccessRequestInMemoryDataAccess()
        request = await store.create(ACCESS_REQUEST)

        approved = await store.approve(request.id, "welcome aboard", "admin-1")

        assert approved.status is AccessRequestStatus.APPROVED
        assert approved.admin_notes == "welcome aboard"
        assert approved.reviewed_by == "admin-1"
        assert approved.reviewed_at is not None

    @pytest.mark.asyncio
    async def test_list_filters_and_paginates(self):
        store = AccessRequestInMemoryDataAccess()
        first = await store.create(ACCESS_REQUEST)
        second = await store.create(ACCESS_REQUEST)
        third = await store.create(ACCESS_REQUEST)
        await store.reject(second.id)

        pending = await store.list_requests(status=AccessRequestStatus.PENDING)
        page = await store.list_requests(limit=1, offset=1)

        assert {r.id for r in pending} == {first.id, third.id}
        assert len(page) == 1


class TestPaymentMethods:
    @pytest.mark.asyncio
    async def test_lookup_by_owner(self):
        store = PaymentMethodInMemoryDataAccess()
        mine = await store.create({"user_id": "u1", "stripe_payment_method_id": "pm_abc", "last4": "4242"})
        await store.create({"user_id": "u2", "stripe_payment_method_id": "pm_def"})

        owned = await store.get_by_user("u1")

        assert [pm.id for pm in owned] == [mine.id]
        assert mine.id.startswith("pm_")
        assert await store.get_by_user("nobody") == []

    @pytest.mark.asyncio
    async def test_last4_must_be_four_digits(self):
        store = PaymentMethodInMemoryDataAccess()

        with pytest.raises(ValidationError) as exc_info:
            await store.create({"user_id": "u1", "stripe_payment_method_id": "pm_abc", "last4": "42"})

        assert "last4" in exc_info.value.field_errors


class TestUserProfiles:
    @pytest.mark.asyncio
    async def test_update_keeps_created_at(self):
        store = UserProfileInMemoryDataAccess()
        profile = await store.create({"name": "Ada", "email": "ada@example.com"})

        updated = await store.update(profile.id, {"organization_name": "Analytical Engines"})

        assert updated.organization_name == "Analytical Engines"
        assert updated.email == "ada@example.com"
        assert updated.created_at == profile.created_at
        assert updated.updated_at >= profile.updated_at

    @pytest.mark.asyncio
    async def test_missing_profile_is_not_found(self):
        store = UserProfileInMemoryDataAccess()

        with pytest.raises(NotFoundError) as exc_info:
            await store.get_by_id("user_missing")

        assert exc_info.value.status_code == 404
        assert "User profile" in exc_info.value.message
