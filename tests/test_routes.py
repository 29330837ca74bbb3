"""End-to-end tests of the entity routes against the in-memory backend."""

from __future__ import annotations

import pytest

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


def _create_post(client, headers, **fields):
    body = {"title": "Hello", "content": "World", **fields}
    response = client.post("/v1/posts", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestPosts:
    def test_reads_are_public(self, client):
        response = client.get("/v1/posts")

        assert response.status_code == 200
        assert response.json() == []

    def test_create_requires_api_key(self, client):
        response = client.post("/v1/posts", json={"title": "x", "content": "y"})

        assert response.status_code == 403

    def test_create_then_fetch_by_id_and_slug(self, client, api_key_headers):
        post = _create_post(client, api_key_headers, slug="hello-world")

        by_id = client.get(f"/v1/posts/{post['id']}")
        by_slug = client.get("/v1/posts/slug/hello-world")

        assert by_id.status_code == 200
        assert by_slug.json()["id"] == post["id"]

    def test_unknown_post_is_404_with_error_body(self, client):
        response = client.get("/v1/posts/nope")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "not_found"
        assert error["message"] == "Post with id nope not found"

    def test_published_filter(self, client, api_key_headers):
        _create_post(client, api_key_headers, title="Draft")
        live = _create_post(client, api_key_headers, title="Live", is_published=True)

        response = client.get("/v1/posts", params={"published": "true"})

        assert [post["id"] for post in response.json()] == [live["id"]]

    def test_update_and_delete(self, client, api_key_headers):
        post = _create_post(client, api_key_headers)

        updated = client.put(
            f"/v1/posts/{post['id']}", json={"title": "Renamed"}, headers=api_key_headers
        )
        deleted = client.delete(f"/v1/posts/{post['id']}", headers=api_key_headers)

        assert updated.json()["title"] == "Renamed"
        assert updated.json()["content"] == "World"
        assert deleted.status_code == 204
        assert client.get(f"/v1/posts/{post['id']}").status_code == 404

    def test_batch_get_reports_missing(self, client, api_key_headers):
        first = _create_post(client, api_key_headers)
        second = _create_post(client, api_key_headers)

        response = client.post(
            "/v1/posts/batch/get",
            json={"ids": [second["id"], "nope", first["id"], second["id"]]},
        )

        body = response.json()
        assert response.status_code == 200
        assert set(body["items"]) == {first["id"], second["id"]}
        assert body["missing"] == ["nope"]


class TestProjects:
    def test_all_routes_require_api_key(self, client):
        assert client.get("/v1/projects").status_code == 403

    def test_batch_create_is_all_or_nothing(self, client, api_key_headers):
        response = client.post(
            "/v1/projects/batch",
            json={"items": [{"name": "ok", "user_id": "u1"}, {"name": "missing owner"}]},
            headers=api_key_headers,
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert "1.user_id" in error["details"]["field_errors"]
        assert client.get("/v1/projects", headers=api_key_headers).json() == []

    def test_batch_create_and_update(self, client, api_key_headers):
        created = client.post(
            "/v1/projects/batch",
            json={"items": [{"name": "A", "user_id": "u1"}, {"name": "B", "user_id": "u1"}]},
            headers=api_key_headers,
        )
        ids = [project["id"] for project in created.json()]

        response = client.patch(
            "/v1/projects/batch",
            json={
                "updates": [
                    {"id": ids[0], "data": {"status": "active"}},
                    {"id": "nope", "data": {"status": "archived"}},
                ]
            },
            headers=api_key_headers,
        )

        body = response.json()
        assert created.status_code == 201
        assert response.status_code == 200
        assert body["items"][ids[0]]["status"] == "active"
        assert body["items"][ids[0]]["name"] == "A"
        assert body["missing"] == ["nope"]


class TestPaymentMethods:
    def test_all_routes_require_api_key(self, client):
        assert client.get("/v1/payment-methods").status_code == 403

    def test_create_and_filter_by_owner(self, client, api_key_headers):
        created = client.post(
            "/v1/payment-methods",
            json={"user_id": "u1", "stripe_payment_method_id": "pm_abc", "type": "card", "last4": "4242"},
            headers=api_key_headers,
        )
        client.post(
            "/v1/payment-methods",
            json={"user_id": "u2", "stripe_payment_method_id": "pm_def"},
            headers=api_key_headers,
        )

        owned = client.get("/v1/payment-methods", params={"user_id": "u1"}, headers=api_key_headers)
        everything = client.get("/v1/payment-methods", headers=api_key_headers)

        assert created.status_code == 201
        assert [pm["id"] for pm in owned.json()] == [created.json()["id"]]
        assert len(everything.json()) == 2

    def test_update_cannot_move_owner(self, client, api_key_headers):
        created = client.post(
            "/v1/payment-methods",
            json={"user_id": "u1", "stripe_payment_method_id": "pm_abc"},
            headers=api_key_headers,
        ).json()

        response = client.put(
            f"/v1/payment-methods/{created['id']}",
            json={"last4": "1881", "user_id": "u2"},
            headers=api_key_headers,
        )

        assert response.status_code == 200
        assert response.json()["last4"] == "1881"
        assert response.json()["user_id"] == "u1"

    def test_delete_then_404(self, client, api_key_headers):
        created = client.post(
            "/v1/payment-methods",
            json={"user_id": "u1", "stripe_payment_method_id": "pm_abc"},
            headers=api_key_headers,
        ).json()

        deleted = client.delete(f"/v1/payment-methods/{created['id']}", headers=api_key_headers)
        fetched = client.get(f"/v1/payment-methods/{created['id']}", headers=api_key_headers)

        assert deleted.status_code == 204
        assert fetched.status_code == 404
        assert fetched.json()["error"]["code"] == "not_found"


class TestUserProfiles:
    def test_all_routes_require_api_key(self, client):
        assert client.get("/v1/user-profiles").status_code == 403

    def test_invalid_email_is_rejected(self, client, api_key_headers):
        response = client.post(
            "/v1/user-profiles",
            json={"name": "Ada", "email": "not-an-email"},
            headers=api_key_headers,
        )

        assert response.status_code == 422

    def test_crud_and_batch_get(self, client, api_key_headers):
        created = client.post(
            "/v1/user-profiles",
            json={"name": "Ada", "email": "ada@example.com"},
            headers=api_key_headers,
        ).json()

        updated = client.put(
            f"/v1/user-profiles/{created['id']}",
            json={"organization_name": "Analytical Engines"},
            headers=api_key_headers,
        )
        batch = client.post(
            "/v1/user-profiles/batch/get",
            json={"ids": [created["id"], "user_missing"]},
            headers=api_key_headers,
        )

        assert updated.json()["organization_name"] == "Analytical Engines"
        assert updated.json()["name"] == "Ada"
        assert list(batch.json()["items"]) == [created["id"]]
        assert batch.json()["missing"] == ["user_missing"]


class TestAccessRequests:
    def test_submission_is_public_and_pending(self, client):
        response = client.post("/v1/access-requests", json=ACCESS_REQUEST)

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"email": "not-an-email"},
            {"use_case": "short"},
            {"team_size": "a lot"},
        ],
    )
    def test_submission_is_validated(self, client, overrides):
        response = client.post("/v1/access-requests", json={**ACCESS_REQUEST, **overrides})

        assert response.status_code == 422

    def test_review_queue_requires_api_key(self, client):
        assert client.get("/v1/access-requests").status_code == 403

    def test_approve_flow(self, client, api_key_headers):
        submitted = client.post("/v1/access-requests", json=ACCESS_REQUEST).json()

        approved = client.post(
            f"/v1/access-requests/{submitted['id']}/approve",
            json={"notes": "welcome", "reviewed_by": "admin-1"},
            headers=api_key_headers,
        )
        pending = client.get(
            "/v1/access-requests", params={"status": "pending"}, headers=api_key_headers
        )

        assert approved.status_code == 200
        assert approved.json()["status"] == "approved"
        assert approved.json()["admin_notes"] == "welcome"
        assert pending.json() == []

    def test_reject_without_body(self, client, api_key_headers):
        submitted = client.post("/v1/access-requests", json=ACCESS_REQUEST).json()

        rejected = client.post(
            f"/v1/access-requests/{submitted['id']}/reject", headers=api_key_headers
        )

        assert rejected.json()["status"] == "rejected"

    def test_unknown_action_is_422(self, client, api_key_headers):
        submitted = client.post("/v1/access-requests", json=ACCESS_REQUEST).json()

        response = client.post(
            f"/v1/access-requests/{submitted['id']}/escalate", headers=api_key_headers
        )

        assert response.status_code == 422


def test_health(client):
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["backend_mode"] == "memory"


def test_openapi_documents_throttling(client):
    schema = client.get("/openapi.json").json()

    assert "ApiKeyAuth" in schema["components"]["securitySchemes"]
    assert "429" in schema["paths"]["/v1/posts"]["get"]["responses"]
    assert "429" not in schema["paths"]["/health"]["get"]["responses"]
