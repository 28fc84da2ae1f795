from datetime import timedelta

from conftest import ADMIN_EMAIL, login, login_admin, register

from movie_catalog.models.user import User
from movie_catalog.utils import create_access_token


def test_register_creates_user_with_default_avatar(client):
    body = register(client, "a@x.com")

    assert body["email"] == "a@x.com"
    assert body["role"] == "USER"
    assert body["avatar"] == "https://cdn.test/avatars/default.png"
    assert "password" not in body and "hashedPassword" not in body


def test_register_duplicate_email_is_conflict(client):
    register(client, "a@x.com")

    response = client.post("/auth/register", json={"email": "A@x.com", "password": "secret1"})

    assert response.status_code == 409
    assert response.json() == {"error": "Email already registered"}


def test_register_rejects_short_password(client):
    response = client.post("/auth/register", json={"email": "a@x.com", "password": "12345"})

    assert response.status_code == 400
    assert "at least 6 characters" in response.json()["error"]


def test_register_rejects_missing_field(client):
    response = client.post("/auth/register", json={"email": "a@x.com"})

    assert response.status_code == 400
    assert "error" in response.json()


def test_login_sets_http_only_cookie(client):
    register(client, "a@x.com")

    response = login(client, "a@x.com")

    cookie = response.headers["set-cookie"]
    assert cookie.startswith("token=")
    assert "HttpOnly" in cookie
    assert "Path=/" in cookie
    assert "Max-Age=604800" in cookie
    assert response.json() == {"message": "Login successful"}


def test_login_unknown_user_is_not_found(client):
    response = client.post("/auth/login", json={"email": "ghost@x.com", "password": "secret1"})

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_login_wrong_password_is_unauthorized(client):
    register(client, "a@x.com")

    response = client.post("/auth/login", json={"email": "a@x.com", "password": "wrong-one"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid password"}


def test_me_requires_token(client):
    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


def test_me_rejects_garbage_token(client):
    client.cookies.set("token", "not-a-jwt")

    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_me_rejects_expired_token(client):
    user = User(id=1, email=ADMIN_EMAIL)
    client.cookies.set("token", create_access_token(user, timedelta(seconds=-10)))

    response = client.get("/auth/me")

    assert response.status_code == 401
    assert response.json() == {"error": "Token has expired"}


def test_me_returns_profile_and_favorites(client):
    login_admin(client)

    response = client.get("/auth/me")

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == ADMIN_EMAIL
    assert body["role"] == "ADMIN"
    assert body["favorites"] == []


def test_logout_clears_cookie(client):
    register(client, "a@x.com")
    login(client, "a@x.com")

    response = client.post("/auth/logout")

    assert response.status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_profile_update_changes_own_password(client):
    register(client, "a@x.com")
    login(client, "a@x.com")

    response = client.patch("/auth/me", json={"password": "newsecret", "avatar": "https://cdn.test/a.png"})

    assert response.status_code == 200
    assert response.json()["avatar"] == "https://cdn.test/a.png"
    assert client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"}).status_code == 401
    login(client, "a@x.com", "newsecret")


def test_profile_update_ignores_blank_password(client):
    register(client, "a@x.com")
    login(client, "a@x.com")

    response = client.patch("/auth/me", json={"email": "b@x.com", "password": ""})

    assert response.status_code == 200
    assert response.json()["email"] == "b@x.com"
    login(client, "b@x.com")


def test_profile_update_email_conflict(client):
    register(client, "a@x.com")
    register(client, "b@x.com")
    login(client, "a@x.com")

    response = client.patch("/auth/me", json={"email": "b@x.com"})

    assert response.status_code == 409


def test_profile_update_cannot_change_role(client):
    register(client, "a@x.com")
    login(client, "a@x.com")

    response = client.patch("/auth/me", json={"role": "ADMIN"})

    assert response.status_code == 200
    assert response.json()["role"] == "USER"
