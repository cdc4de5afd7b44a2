"""
API contract tests.

Each test gets a fresh app over the in-memory store (see conftest).
"""

import time

from bson import ObjectId

from core.security import create_access_token


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def register(client, email="asha@pesu.edu", password="secret1", name="Asha", srn=None):
    body = {"name": name, "email": email, "password": password}
    if srn is not None:
        body["srn"] = srn
    return client.post("/api/users/register", json=body)


def auth_headers(client, email="asha@pesu.edu") -> dict:
    token = register(client, email=email).json()["token"]
    return {"Authorization": f"Bearer {token}"}


def post_form(**overrides) -> dict:
    form = {
        "title": "Lost iPhone 13",
        "description": "Blue case with my ID inside.",
        "location": "EC Block, PESU",
        "contactInfo": "test@pesu.edu",
        "type": "Lost",
    }
    form.update(overrides)
    return form


def create_post(client, headers, **overrides) -> dict:
    response = client.post("/api/posts", data=post_form(**overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestUsers:

    def test_register(self, client):
        response = register(client, srn="PES1UG123456")

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"id", "name", "email", "srn", "token"}
        assert body["email"] == "asha@pesu.edu"
        assert body["srn"] == "PES1UG123456"

    def test_register_duplicate_email(self, client):
        register(client)

        response = register(client, name="Someone else")

        assert response.status_code == 400
        assert response.json() == {"error": "User already exists with this email."}

    def test_register_validation(self, client):
        assert register(client, email="not-an-email").status_code == 400
        assert register(client, password="123").status_code == 400

        response = register(client, srn="1234")
        assert response.status_code == 400
        assert "SRN" in response.json()["error"]

    def test_register_normalizes_email(self, client):
        response = register(client, email="  Asha@PESU.edu ")

        assert response.status_code == 201
        assert response.json()["email"] == "asha@pesu.edu"

    def test_long_invalid_email_rejected_quickly(self, client):
        started = time.perf_counter()

        response = register(client, email="a" * 64 + "!")

        assert response.status_code == 400
        assert time.perf_counter() - started < 1.0

    def test_login(self, client):
        registered = register(client).json()

        response = client.post("/api/users/login", json={"email": "ASHA@pesu.edu", "password": "secret1"})

        assert response.status_code == 200
        assert response.json()["id"] == registered["id"]
        assert response.json()["token"]

    def test_login_wrong_password(self, client):
        register(client)

        response = client.post("/api/users/login", json={"email": "asha@pesu.edu", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password."}

    def test_profile(self, client):
        registered = register(client).json()

        response = client.get(
            "/api/users/profile",
            headers={"Authorization": f"Bearer {registered['token']}"},
        )

        assert response.status_code == 200
        assert response.json() == {"id": registered["id"], "name": "Asha", "email": "asha@pesu.edu"}

    def test_profile_requires_token(self, client):
        response = client.get("/api/users/profile")

        assert response.status_code == 401
        assert response.json() == {"error": "Access denied. No token provided."}

    def test_profile_rejects_bad_token(self, client):
        response = client.get("/api/users/profile", headers={"Authorization": "Bearer garbage"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token."}


class TestPosts:

    def test_create_and_fetch(self, client):
        headers = auth_headers(client)

        created = create_post(client, headers, currentLocation="")
        fetched = client.get(f"/api/posts/{created['_id']}")

        assert fetched.status_code == 200
        body = fetched.json()
        assert body["title"] == "Lost iPhone 13"
        assert body["contactInfo"] == "test@pesu.edu"
        assert body["currentLocation"] is None
        assert body["imageUrl"] is None
        assert "createdAt" in body and "userId" in body

    def test_create_requires_auth(self, client):
        response = client.post("/api/posts", data=post_form())

        assert response.status_code == 401

    def test_create_rejects_unknown_type(self, client):
        headers = auth_headers(client)

        response = client.post("/api/posts", data=post_form(type="Stolen"), headers=headers)

        assert response.status_code == 400

    def test_create_rejects_blank_title(self, client):
        headers = auth_headers(client)

        response = client.post("/api/posts", data=post_form(title="   "), headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Title is required"}

    def test_create_with_image(self, client):
        headers = auth_headers(client)

        response = client.post(
            "/api/posts",
            data=post_form(),
            files={"image": ("phone.png", PNG_BYTES, "image/png")},
            headers=headers,
        )

        assert response.status_code == 201
        image_url = response.json()["imageUrl"]
        assert image_url.startswith("/uploads/")

        served = client.get(image_url)
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    def test_create_rejects_non_image(self, client):
        headers = auth_headers(client)

        response = client.post(
            "/api/posts",
            data=post_form(),
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Only image files are allowed."}

    def test_get_missing_post(self, client):
        assert client.get(f"/api/posts/{ObjectId()}").status_code == 404
        assert client.get("/api/posts/not-an-id").json() == {"error": "Post not found."}

    def test_pagination_bounds(self, client):
        headers = auth_headers(client)
        for i in range(12):
            create_post(client, headers, title=f"Item {i}")

        response = client.get("/api/posts", params={"page": 3, "limit": 5})

        body = response.json()
        assert response.status_code == 200
        assert len(body["posts"]) == 2
        assert body["totalPages"] == 3
        assert body["currentPage"] == 3
        assert body["totalPosts"] == 12

    def test_default_page_is_newest_ten(self, client):
        headers = auth_headers(client)
        for i in range(11):
            create_post(client, headers, title=f"Item {i}")

        body = client.get("/api/posts").json()

        assert len(body["posts"]) == 10
        assert body["posts"][0]["title"] == "Item 10"
        assert body["currentPage"] == 1

    def test_invalid_page_rejected(self, client):
        assert client.get("/api/posts", params={"page": 0}).status_code == 400
        assert client.get("/api/posts", params={"limit": "abc"}).status_code == 400
        assert client.get("/api/posts", params={"limit": 101}).status_code == 400
        assert client.get("/api/posts", params={"limit": 100}).status_code == 200

    def test_filter_by_type(self, client):
        headers = auth_headers(client)
        create_post(client, headers, type="Lost")
        create_post(client, headers, type="Found", currentLocation="Reception")
        create_post(client, headers, type="Found")

        body = client.get("/api/posts", params={"type": "found"}).json()

        assert body["totalPosts"] == 2
        assert {post["type"] for post in body["posts"]} == {"Found"}

    def test_filter_by_location(self, client):
        headers = auth_headers(client)
        create_post(client, headers, location="Cafeteria, PESU")
        create_post(client, headers, location="EC Block, PESU")

        body = client.get("/api/posts", params={"location": "cafeteria"}).json()

        assert [post["location"] for post in body["posts"]] == ["Cafeteria, PESU"]

    def test_update_own_post(self, client):
        headers = auth_headers(client)
        created = create_post(client, headers)

        response = client.put(
            f"/api/posts/{created['_id']}",
            data={"title": "Still lost", "currentLocation": "Library"},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Still lost"
        assert body["currentLocation"] == "Library"
        assert body["description"] == created["description"]

    def test_update_someone_elses_post(self, client):
        owner = auth_headers(client, email="owner@pesu.edu")
        stranger = auth_headers(client, email="stranger@pesu.edu")
        created = create_post(client, owner)

        response = client.put(f"/api/posts/{created['_id']}", data={"title": "Mine"}, headers=stranger)

        assert response.status_code == 403
        assert response.json() == {"error": "Not authorized to update this post."}
        assert client.get(f"/api/posts/{created['_id']}").json()["title"] == created["title"]

    def test_update_missing_post(self, client):
        headers = auth_headers(client)

        response = client.put(f"/api/posts/{ObjectId()}", data={"title": "x"}, headers=headers)

        assert response.status_code == 404

    def test_delete_own_post(self, client):
        headers = auth_headers(client)
        created = create_post(client, headers)

        response = client.delete(f"/api/posts/{created['_id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Post deleted successfully."}
        assert client.get(f"/api/posts/{created['_id']}").status_code == 404

    def test_delete_someone_elses_post(self, client):
        owner = auth_headers(client, email="owner@pesu.edu")
        created = create_post(client, owner)

        # A valid token for a user id that does not own the post
        token = create_access_token(str(ObjectId()), "Mallory", "mallory@pesu.edu")
        response = client.delete(
            f"/api/posts/{created['_id']}",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 403
        assert client.get(f"/api/posts/{created['_id']}").status_code == 200


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["database"] == "memory"
