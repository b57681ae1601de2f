"""API tests for generated JSON endpoints.

Tests cover:
- index/show/store/update/destroy envelopes and status codes
- 404 and 422 error envelopes
- Soft-delete lifecycle routes and capability errors
- Query parameters (sort, filter, include, fields) and pagination
- Alternate formatter and index mode
- Trace header, unhandled exceptions and OpenAPI exposure
- Logger configured from the settings passed to create_app
"""

from unittest.mock import MagicMock

import pytest
import pytest_asyncio
import structlog
from httpx import ASGITransport, AsyncClient

from autocrud import create_app
from autocrud.core.enums import Environment, IndexMode
from tests.fixtures.app.models import Post


async def create_post(client, **data):
    response = await client.post("/api/posts", json={"title": "Hello", **data})
    assert response.status_code == 201
    return response.json()["data"]


@pytest_asyncio.fixture
async def seeded(database):
    """37 posts titled "post 00" .. "post 36"."""
    async with database.get_session() as session:
        session.add_all(
            Post(title=f"post {i:02d}", status="published" if i % 2 else "draft")
            for i in range(37)
        )


class TestStore:
    """POST /api/posts."""

    async def test_creates_record(self, client):
        response = await client.post("/api/posts", json={"title": "Hello", "body": "World"})

        assert response.status_code == 201
        body = response.json()
        assert body["meta"]["message"] == "Post created successfully."
        assert body["data"]["title"] == "Hello"
        assert body["data"]["body"] == "World"
        assert set(body["data"]) == {"id", "title", "body", "status"}

    async def test_list_payload_creates_many(self, client):
        response = await client.post("/api/posts", json={"title": ["A", "B"]})

        assert response.status_code == 201
        assert [post["title"] for post in response.json()["data"]] == ["A", "B"]

    async def test_form_encoded_payload(self, client):
        response = await client.post(
            "/api/posts",
            data={"title": "Form", "_token": "ignored"},
            headers={"Accept": "application/json"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["title"] == "Form"

    @pytest.mark.parametrize("payload", [{}, {"_token": "abc", "_method": "POST"}])
    async def test_empty_payload(self, client, payload):
        response = await client.post("/api/posts", json=payload)

        assert response.status_code == 422
        assert response.json() == {"errors": [{"status": "422", "detail": "No data provided"}]}

    async def test_malformed_json(self, client):
        response = await client.post(
            "/api/posts",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        error = response.json()["errors"][0]
        assert error["detail"] == "Malformed request body"
        assert error["meta"]["errors"] == "Body is not valid JSON."

    async def test_validation_errors(self, client):
        response = await client.post("/api/posts", json={"body": "No title", "status": "archived"})

        assert response.status_code == 422
        error = response.json()["errors"][0]
        assert error["detail"] == "The given data was invalid."
        assert error["meta"]["errors"] == {
            "title": ["The title field is required."],
            "status": ["The status field has an invalid selection."],
        }


class TestShow:
    """GET /api/posts/{id}."""

    async def test_returns_record(self, client):
        post = await create_post(client)
        response = await client.get(f"/api/posts/{post['id']}")

        assert response.status_code == 200
        assert response.json()["meta"]["message"] == "Post retrieved successfully."
        assert response.json()["data"]["id"] == post["id"]

    @pytest.mark.parametrize("record_id", ["999", "abc"])
    async def test_missing_record(self, client, record_id):
        response = await client.get(f"/api/posts/{record_id}")

        assert response.status_code == 404
        assert response.json() == {"errors": [{"status": "404", "detail": "Not found"}]}

    async def test_relations_in_with_are_loaded(self, client):
        post = await create_post(client)
        created = await client.post("/api/comments", json={"post_id": post["id"], "body": "Nice"})
        assert created.status_code == 201

        response = await client.get(f"/api/comments/{created.json()['data']['id']}")
        assert response.json()["data"]["post"]["title"] == "Hello"


class TestUpdate:
    """PUT /api/posts/{id}."""

    async def test_updates_record(self, client):
        post = await create_post(client)
        response = await client.put(f"/api/posts/{post['id']}", json={"title": "Changed"})

        assert response.status_code == 200
        assert response.json()["meta"]["message"] == "Post updated successfully."
        assert response.json()["data"]["title"] == "Changed"

    async def test_missing_record(self, client):
        response = await client.put("/api/posts/999", json={"title": "Changed"})
        assert response.status_code == 404

    async def test_empty_payload(self, client):
        post = await create_post(client)
        response = await client.put(f"/api/posts/{post['id']}", json={})
        assert response.status_code == 422

    async def test_method_override_header(self, client):
        post = await create_post(client)
        response = await client.post(
            f"/api/posts/{post['id']}",
            json={"title": "Overridden"},
            headers={"X-HTTP-Method-Override": "PUT"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Overridden"


class TestDestroyAndTrash:
    """DELETE, trashed, restore and force delete."""

    async def test_soft_delete_lifecycle(self, client):
        post = await create_post(client)
        post_id = post["id"]

        response = await client.delete(f"/api/posts/{post_id}")
        assert response.status_code == 204
        assert response.content == b""
        assert (await client.get(f"/api/posts/{post_id}")).status_code == 404

        trashed = await client.get("/api/posts/trashed")
        assert trashed.status_code == 200
        assert trashed.json()["meta"]["message"] == "Trashed post fetched successfully."
        assert [item["id"] for item in trashed.json()["data"]] == [post_id]

        restored = await client.post(f"/api/posts/{post_id}/restore")
        assert restored.status_code == 200
        assert restored.json()["meta"]["message"] == "Post restored successfully."
        assert (await client.get(f"/api/posts/{post_id}")).status_code == 200

        forced = await client.delete(f"/api/posts/{post_id}/force")
        assert forced.status_code == 204
        assert (await client.get("/api/posts/trashed")).json()["data"] == []

    async def test_destroy_missing(self, client):
        assert (await client.delete("/api/posts/999")).status_code == 404

    async def test_restore_requires_trashed_record(self, client):
        post = await create_post(client)
        response = await client.post(f"/api/posts/{post['id']}/restore")

        assert response.status_code == 404
        assert response.json()["errors"][0]["detail"] == "Trashed item not found"

    async def test_force_delete_missing(self, client):
        assert (await client.delete("/api/posts/999/force")).status_code == 404

    async def test_hard_delete_without_soft_delete(self, client):
        created = await client.post("/api/comments", json={"post_id": 1, "body": "Bye"})
        comment_id = created.json()["data"]["id"]

        assert (await client.delete(f"/api/comments/{comment_id}")).status_code == 204
        assert (await client.get(f"/api/comments/{comment_id}")).status_code == 404

    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/api/comments/trashed"),
            ("POST", "/api/comments/1/restore"),
            ("DELETE", "/api/comments/1/force"),
        ],
    )
    async def test_soft_delete_routes_unsupported(self, client, method, path):
        response = await client.request(method, path)

        assert response.status_code == 400
        assert response.json()["errors"][0]["detail"] == "Soft deletes not enabled for this model"


class TestIndex:
    """GET /api/posts."""

    async def test_first_page(self, client, seeded):
        response = await client.get("/api/posts")

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["message"] == "Posts fetched successfully."
        assert len(body["data"]) == 10
        assert body["meta"]["pagination"] == {
            "current_page": 1,
            "from": 1,
            "last_page": 4,
            "per_page": 10,
            "to": 10,
            "total": 37,
        }
        assert body["links"]["prev"] is None
        assert body["links"]["next"] == "http://test/api/posts?page=2"
        # primary key descending by default
        assert body["data"][0]["title"] == "post 36"

    async def test_last_page(self, client, seeded):
        body = (await client.get("/api/posts?page=4")).json()

        assert len(body["data"]) == 7
        assert body["meta"]["pagination"]["to"] == 37
        assert body["links"]["next"] is None

    async def test_per_page(self, client, seeded):
        body = (await client.get("/api/posts?per_page=5")).json()
        assert body["meta"]["pagination"]["last_page"] == 8

    async def test_sort(self, client, seeded):
        body = (await client.get("/api/posts?sort=title&per_page=3")).json()
        assert [post["title"] for post in body["data"]] == ["post 00", "post 01", "post 02"]

    async def test_filter(self, client, seeded):
        body = (await client.get("/api/posts?filter[status]=draft")).json()
        assert body["meta"]["pagination"]["total"] == 19
        assert {post["status"] for post in body["data"]} == {"draft"}

    async def test_sparse_fields(self, client, seeded):
        body = (await client.get("/api/posts?fields[posts]=title")).json()
        assert set(body["data"][0]) == {"id", "title"}

    async def test_include(self, client, seeded):
        assert (await client.get("/api/posts?include=comments")).status_code == 200

    @pytest.mark.parametrize(
        ("query", "message"),
        [
            ("sort=body", "Requested sort(s) `body` are not allowed."),
            ("filter[title]=x", "Requested filter(s) `title` are not allowed."),
            ("include=author", "Requested include(s) `author` are not allowed."),
        ],
    )
    async def test_disallowed_query(self, client, query, message):
        response = await client.get(f"/api/posts?{query}")

        assert response.status_code == 400
        assert response.json()["errors"][0]["detail"].startswith(message)


class TestConfiguration:
    """Formatter and index mode switches."""

    async def test_json_api_formatter(self, settings, database):
        settings = settings.model_copy(update={"response_formatter": "jsonapi"})
        app = create_app(settings, database=database)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            created = await client.post("/api/posts", json={"title": "Hello"})
            listing = await client.get("/api/posts")

        assert created.headers["content-type"].startswith("application/vnd.api+json")
        assert created.json()["data"]["type"] == "posts"
        assert created.json()["data"]["attributes"]["title"] == "Hello"
        assert listing.json()["data"][0]["id"] == created.json()["data"]["id"]

    async def test_api_only_index_ignores_page_size(self, settings, database, seeded):
        settings = settings.model_copy(update={"index_mode": IndexMode.API_ONLY})
        app = create_app(settings, database=database)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            api = await client.get("/api/posts?per_page=5")
            web = await client.get("/posts")

        assert api.json()["meta"]["pagination"]["per_page"] == 10
        assert web.headers["content-type"].startswith("application/json")
        assert web.json()["meta"]["pagination"]["total"] == 37

    async def test_logger_uses_passed_settings(self, settings, database):
        settings = settings.model_copy(update={"environment": Environment.DEVELOPMENT})
        try:
            create_app(settings, database=database)
            renderer = structlog.get_config()["processors"][-1]
            assert isinstance(renderer, structlog.dev.ConsoleRenderer)

            testing = settings.model_copy(update={"environment": Environment.TESTING})
            create_app(testing, database=database)
            renderer = structlog.get_config()["processors"][-1]
            assert isinstance(renderer, structlog.processors.JSONRenderer)
        finally:
            structlog.reset_defaults()


class TestInfrastructure:
    """Cross-cutting behavior."""

    async def test_trace_id_header(self, client):
        response = await client.get("/api/posts", headers={"X-Trace-Id": "trace-123"})
        assert response.headers["X-Trace-Id"] == "trace-123"

        generated = await client.get("/api/posts")
        assert generated.headers["X-Trace-Id"]

    async def test_unknown_route_uses_error_envelope(self, client):
        response = await client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json()["errors"][0]["status"] == "404"

    async def test_unhandled_exception_uses_error_envelope(self, app):
        async def explode():
            raise RuntimeError("boom")

        app.add_api_route("/api/explode", explode)
        app.state.logger = MagicMock()
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/explode", headers={"X-Trace-Id": "trace-500"})

        assert response.status_code == 500
        assert response.json() == {"errors": [{"status": "500", "detail": "Server Error"}]}
        app.state.logger.error.assert_called_once()
        assert app.state.logger.error.call_args.args[0] == "unhandled_exception"
        assert app.state.logger.error.call_args.kwargs["trace_id"] == "trace-500"

    async def test_openapi_lists_api_routes_only(self, client):
        schema = (await client.get("/openapi.json")).json()

        assert "/api/posts" in schema["paths"]
        assert "/api/documents/files/batch" in schema["paths"]
        assert "/posts" not in schema["paths"]
        assert schema["paths"]["/api/posts"]["get"]["operationId"] == "posts.index"
