"""Tests for the goapp example: users, notes, classified error responses."""

from perch.testing import TestClient


class TestHome:
    async def test_html_by_default(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/")
            assert response.status == 200
            assert response.content_type == "text/html; charset=utf-8"
            assert "Welcome" in response.text

    async def test_json_when_requested(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/", headers={"Content-Type": "application/json"})
            assert response.json == {"data": "hello world", "status": 200}


class TestHealth:
    async def test_health(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/-/health")
            assert response.status == 200
            assert response.json["data"]["status"] == "all systems up and running"

    async def test_trailing_slash(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/-/health/")
            assert response.status == 200


class TestUsers:
    async def test_create_and_read(self, example_app) -> None:
        async with TestClient(example_app) as client:
            created = await client.post(
                "/users", json={"email": " jane@example.com ", "firstName": "Jane"}
            )
            assert created.status == 201
            assert created.json["data"]["email"] == "jane@example.com"

            response = await client.get("/users/jane@example.com")
            assert response.status == 200
            assert response.json["data"]["firstName"] == "Jane"

    async def test_invalid_json_is_400(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/users", body=b"{not json")
            assert response.status == 400
            assert response.json == {"errors": "invalid JSON provided", "status": 400}

    async def test_invalid_email_is_422(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.post("/users", json={"email": "nope"})
            assert response.status == 422
            assert response.json["errors"] == "invalid email address provided"

    async def test_duplicate_is_409(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.post("/users", json={"email": "a@b.c"})
            response = await client.post("/users", json={"email": "a@b.c"})
            assert response.status == 409

    async def test_unknown_user_is_404(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/users/ghost@example.com")
            assert response.status == 404
            assert response.json == {"errors": "user not found", "status": 404}


class TestNotes:
    async def test_create_and_list(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.post("/users", json={"email": "a@b.c"})
            created = await client.post(
                "/users/a@b.c/notes", json={"title": " Groceries ", "content": "milk"}
            )
            assert created.status == 201
            assert created.json["data"]["title"] == "Groceries"
            assert created.json["data"]["creator"] == "a@b.c"

            listed = await client.get("/users/a@b.c/notes")
            assert listed.status == 200
            assert [n["title"] for n in listed.json["data"]] == ["Groceries"]

    async def test_empty_title_is_422(self, example_app) -> None:
        async with TestClient(example_app) as client:
            await client.post("/users", json={"email": "a@b.c"})
            response = await client.post(
                "/users/a@b.c/notes", json={"title": " ", "content": "milk"}
            )
            assert response.status == 422
            assert response.json["errors"] == "note title cannot be empty"

    async def test_notes_for_unknown_user_is_404(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/users/ghost@example.com/notes")
            assert response.status == 404


class TestRoutingMisses:
    async def test_unknown_path(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.get("/nowhere")
            assert response.status == 404

    async def test_unsupported_method(self, example_app) -> None:
        async with TestClient(example_app) as client:
            response = await client.request("TRACE", "/users")
            assert response.status == 501
