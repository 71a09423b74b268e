import uuid

from httpx import AsyncClient
import pytest


async def _create(client: AsyncClient, title: str = "Hello world", body: str = "First post body") -> str:
    resp = await client.post("/posts/new", data={"title": title, "body": body})
    assert resp.status_code == 302, resp.text
    location = resp.headers["location"]
    assert location.startswith("/posts/")
    return location.removeprefix("/posts/")


@pytest.mark.integration
@pytest.mark.anyio
async def test_root_redirects_to_list(client: AsyncClient):
    resp = await client.get("/")

    assert resp.status_code == 302
    assert resp.headers["location"] == "/posts/"

    listing = await client.get(resp.headers["location"])
    assert listing.status_code == 200


@pytest.mark.integration
@pytest.mark.anyio
async def test_empty_list(client: AsyncClient):
    resp = await client.get("/posts/")

    assert resp.status_code == 200
    assert "No posts yet" in resp.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_list_without_trailing_slash(client: AsyncClient):
    post_id = await _create(client)

    resp = await client.get("/posts")

    assert resp.status_code == 200
    assert f'href="/posts/{post_id}"' in resp.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_new_form_is_empty(client: AsyncClient):
    resp = await client.get("/posts/new")

    assert resp.status_code == 200
    assert 'action="/posts/new"' in resp.text
    assert 'class="errors"' not in resp.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_create_show_and_list(client: AsyncClient):
    body = "B" * 70
    post_id = await _create(client, "  Spaced title  ", f"  {body}  ")

    show = await client.get(f"/posts/{post_id}")
    assert show.status_code == 200
    assert "Spaced title" in show.text
    assert "  Spaced title  " not in show.text
    assert f"/posts/{post_id}" in show.text

    listing = await client.get("/posts/")
    assert listing.status_code == 200
    assert f'href="/posts/{post_id}"' in listing.text
    assert "B" * 50 + "..." in listing.text
    assert "B" * 51 not in listing.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_create_rejects_empty_title(client: AsyncClient):
    resp = await client.post("/posts/new", data={"title": "", "body": "hello"})

    assert resp.status_code == 400
    assert "Title is required." in resp.text
    assert "hello" in resp.text

    listing = await client.get("/posts/")
    assert "No posts yet" in listing.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_create_rejects_long_title(client: AsyncClient):
    resp = await client.post("/posts/new", data={"title": "A" * 201, "body": "hello"})

    assert resp.status_code == 400
    assert "Title must be 200 characters or fewer." in resp.text

    listing = await client.get("/posts/")
    assert "No posts yet" in listing.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_create_rejects_missing_fields(client: AsyncClient):
    resp = await client.post("/posts/new", data={})

    assert resp.status_code == 400
    assert resp.text.index("Title is required.") < resp.text.index("Body is required.")


@pytest.mark.integration
@pytest.mark.anyio
async def test_create_rejects_long_body(client: AsyncClient):
    resp = await client.post("/posts/new", data={"title": "Title", "body": "x" * 10001})

    assert resp.status_code == 400
    assert "Body is too long." in resp.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_show_unknown_id_is_404(client: AsyncClient):
    resp = await client.get(f"/posts/{uuid.uuid4().hex}")

    assert resp.status_code == 404
    assert "Post not found" in resp.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_edit_form_is_prefilled(client: AsyncClient):
    post_id = await _create(client, "Editable", "Original body")

    resp = await client.get(f"/posts/{post_id}/edit")

    assert resp.status_code == 200
    assert 'value="Editable"' in resp.text
    assert "Original body" in resp.text
    assert 'name="_method" value="PUT"' in resp.text


@pytest.mark.integration
@pytest.mark.anyio
@pytest.mark.parametrize("style", ["put", "override-field", "override-query", "update-path"])
async def test_update_replaces_post(client: AsyncClient, style: str):
    post_id = await _create(client, "Old title", "Old body")
    data = {"title": "New title", "body": "New body"}

    if style == "put":
        resp = await client.put(f"/posts/{post_id}", data=data)
    elif style == "override-field":
        resp = await client.post(f"/posts/{post_id}", data={**data, "_method": "PUT"})
    elif style == "override-query":
        resp = await client.post(f"/posts/{post_id}?_method=PUT", data=data)
    else:
        resp = await client.post(f"/posts/{post_id}/update", data=data)

    assert resp.status_code == 302
    assert resp.headers["location"] == f"/posts/{post_id}"

    show = await client.get(f"/posts/{post_id}")
    assert "New title" in show.text
    assert "New body" in show.text
    assert "Old title" not in show.text
    assert "Old body" not in show.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_update_validation_error_keeps_post(client: AsyncClient):
    post_id = await _create(client, "Stable", "Stable body")

    resp = await client.put(f"/posts/{post_id}", data={"title": "   ", "body": "changed"})

    assert resp.status_code == 400
    assert "Title is required." in resp.text
    assert "changed" in resp.text

    show = await client.get(f"/posts/{post_id}")
    assert "Stable body" in show.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_update_accepts_body_over_create_limit(client: AsyncClient):
    post_id = await _create(client)

    resp = await client.put(f"/posts/{post_id}", data={"title": "Long", "body": "y" * 10050})

    assert resp.status_code == 302


@pytest.mark.integration
@pytest.mark.anyio
async def test_update_unknown_id_is_404(client: AsyncClient):
    resp = await client.put(f"/posts/{uuid.uuid4().hex}", data={"title": "Title", "body": "Body"})

    assert resp.status_code == 404


@pytest.mark.integration
@pytest.mark.anyio
@pytest.mark.parametrize("style", ["delete", "override-field", "delete-path"])
async def test_delete_then_not_found(client: AsyncClient, style: str):
    post_id = await _create(client)

    if style == "delete":
        resp = await client.delete(f"/posts/{post_id}")
    elif style == "override-field":
        resp = await client.post(f"/posts/{post_id}", data={"_method": "DELETE"})
    else:
        resp = await client.post(f"/posts/{post_id}/delete")

    assert resp.status_code == 302
    assert resp.headers["location"] == "/posts/"

    assert (await client.get(f"/posts/{post_id}")).status_code == 404
    # A second delete reports NotFound, not a server error
    assert (await client.delete(f"/posts/{post_id}")).status_code == 404


@pytest.mark.integration
@pytest.mark.anyio
async def test_method_override_fallback_is_405(client: AsyncClient):
    post_id = await _create(client)

    resp = await client.post(f"/posts/{post_id}", data={"title": "x", "body": "y"})

    assert resp.status_code == 405


@pytest.mark.integration
@pytest.mark.anyio
async def test_list_is_in_creation_order(client: AsyncClient):
    first = await _create(client, "Post one", "one")
    second = await _create(client, "Post two", "two")

    listing = (await client.get("/posts/")).text

    assert listing.index(f"/posts/{first}") < listing.index(f"/posts/{second}")


@pytest.mark.integration
@pytest.mark.anyio
async def test_titles_are_escaped(client: AsyncClient):
    post_id = await _create(client, "<script>alert(1)</script>", "body")

    show = await client.get(f"/posts/{post_id}")

    assert "<script>alert(1)</script>" not in show.text
    assert "&lt;script&gt;" in show.text


@pytest.mark.integration
@pytest.mark.anyio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["status"] == "ok"


@pytest.mark.integration
@pytest.mark.anyio
async def test_response_headers(client: AsyncClient):
    resp = await client.get("/posts/", headers={"X-Request-Id": "req-123"})

    assert resp.headers["X-Request-Id"] == "req-123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert "form-action 'self'" in resp.headers["Content-Security-Policy"]


@pytest.mark.integration
@pytest.mark.anyio
async def test_static_stylesheet(client: AsyncClient):
    resp = await client.get("/static/style.css")

    assert resp.status_code == 200
    assert "text/css" in resp.headers["content-type"]


@pytest.mark.integration
@pytest.mark.anyio
@pytest.mark.parametrize("post_id", ["%00", "not-an-id", "a" * 40])
async def test_malformed_id_is_404(client: AsyncClient, post_id: str):
    assert (await client.get(f"/posts/{post_id}")).status_code == 404
    assert (await client.put(f"/posts/{post_id}", data={"title": "t", "body": "b"})).status_code == 404
    assert (await client.delete(f"/posts/{post_id}")).status_code == 404
