"""API tests for the HTML route group.

Tests cover:
- Rendered index, show, create and edit pages
- Form submissions redirecting with flashed status messages
- Validation failures redirecting back with errors
- _method override for update and delete forms
- Content negotiation on web routes
"""

import pytest


async def create_post(client, title="Hello"):
    response = await client.post("/api/posts", json={"title": title})
    return response.json()["data"]


class TestPages:
    """GET pages."""

    async def test_empty_index(self, client):
        response = await client.get("/posts")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "No records found." in response.text

    async def test_index_lists_records(self, client):
        post = await create_post(client, "Visible title")
        response = await client.get("/posts")

        assert "Visible title" in response.text
        assert f'/posts/{post["id"]}/edit' in response.text

    async def test_index_negotiates_json(self, client):
        await create_post(client)
        response = await client.get("/posts", headers={"Accept": "application/json"})

        assert response.headers["content-type"].startswith("application/json")
        assert response.json()["meta"]["pagination"]["total"] == 1

    async def test_show(self, client):
        post = await create_post(client, "Shown")
        response = await client.get(f"/posts/{post['id']}")

        assert response.status_code == 200
        assert "Post Details" in response.text
        assert "Shown" in response.text

    async def test_show_missing(self, client):
        response = await client.get("/posts/999")
        assert response.status_code == 404

    async def test_create_form(self, client):
        response = await client.get("/posts/create")

        assert response.status_code == 200
        assert "Create Post" in response.text
        assert 'name="title"' in response.text

    async def test_edit_form(self, client):
        post = await create_post(client, "Editable")
        response = await client.get(f"/posts/{post['id']}/edit")

        assert response.status_code == 200
        assert 'value="Editable"' in response.text
        assert 'name="_method" value="PUT"' in response.text


class TestForms:
    """Form submissions."""

    async def test_store_redirects_with_status(self, client):
        response = await client.post("/posts", data={"title": "From form", "_token": "t"})

        assert response.status_code == 303
        assert response.headers["location"] == "http://test/posts"

        page = await client.get("/posts")
        assert "From form" in page.text
        assert "Post created successfully." in page.text

    async def test_store_validation_failure_redirects_back(self, client):
        response = await client.post(
            "/posts",
            data={"body": "No title"},
            headers={"Referer": "http://test/posts/create"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "http://test/posts/create"

        page = await client.get("/posts/create")
        assert "The title field is required." in page.text

    async def test_store_empty_payload_redirects_back(self, client):
        response = await client.post(
            "/posts",
            data={"_token": "t"},
            headers={"Accept": "text/html", "Referer": "http://test/posts/create"},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "http://test/posts/create"

        page = await client.get("/posts/create")
        assert "No data provided" in page.text

    async def test_update_empty_payload_redirects_to_edit(self, client):
        post = await create_post(client)
        response = await client.post(
            f"/posts/{post['id']}", data={"_method": "PUT", "_token": "t"}
        )

        assert response.status_code == 303
        assert response.headers["location"] == f"http://test/posts/{post['id']}/edit"

        page = await client.get(f"/posts/{post['id']}/edit")
        assert "No data provided" in page.text

    async def test_update_through_method_override(self, client):
        post = await create_post(client)
        response = await client.post(
            f"/posts/{post['id']}", data={"_method": "PUT", "title": "Edited"}
        )

        assert response.status_code == 303
        shown = await client.get(f"/api/posts/{post['id']}")
        assert shown.json()["data"]["title"] == "Edited"

    async def test_delete_through_method_override(self, client):
        post = await create_post(client)
        response = await client.post(f"/posts/{post['id']}", data={"_method": "DELETE"})

        assert response.status_code == 303
        assert (await client.get(f"/api/posts/{post['id']}")).status_code == 404

    @pytest.mark.parametrize("method", ["PUT", "DELETE"])
    async def test_missing_record(self, client, method):
        response = await client.post("/posts/999", data={"_method": method, "title": "x"})
        assert response.status_code == 404
