"""
Tests for registration, login and the hybrid session/JWT guard
"""
from fastapi import status
from slowapi import Limiter
from slowapi.util import get_remote_address

from adoptme.main import app
from adoptme.security import create_access_token
from conftest import auth, disabled_limiter, user_payload, USER_PASSWORD


def test_register_success(client, raw_db):
    response = client.post("/auth/register", json=user_payload(email="NewUser@Example.com"))
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["access_token"]
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "newuser@example.com"
    assert data["user"]["role"] == "user"
    assert "password" not in data["user"]
    assert "password_hash" not in data["user"]

    stored = raw_db.users.find_one({"email": "newuser@example.com"})
    assert stored["password_hash"] != USER_PASSWORD


def test_register_cannot_choose_role(client, raw_db):
    response = client.post("/auth/register", json=user_payload(email="sneaky@example.com", role="admin"))
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["user"]["role"] == "user"
    assert raw_db.users.find_one({"email": "sneaky@example.com"})["role"] == "user"


def test_register_duplicate_email(client):
    client.post("/auth/register", json=user_payload(email="dup@example.com"))
    response = client.post("/auth/register", json=user_payload(email="dup@example.com"))
    assert response.status_code == status.HTTP_409_CONFLICT


def test_register_duplicate_user_name(client):
    client.post("/auth/register", json=user_payload(user_name="taken"))
    response = client.post("/auth/register", json=user_payload(user_name="taken"))
    assert response.status_code == status.HTTP_409_CONFLICT


def test_register_weak_password(client):
    for password in ["short1A", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"]:
        response = client.post("/auth/register", json=user_payload(password=password))
        assert response.status_code == 422, password


def test_register_underage(client):
    response = client.post("/auth/register", json=user_payload(age=17))
    assert response.status_code == 422


def test_login_success_updates_last_connection(client, raw_db):
    client.post("/auth/register", json=user_payload(email="login@example.com"))
    client.cookies.clear()
    assert raw_db.users.find_one({"email": "login@example.com"})["last_connection"] is None

    response = client.post("/auth/login", json={"email": "login@example.com", "password": USER_PASSWORD})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["access_token"]
    assert data["user"]["email"] == "login@example.com"
    assert raw_db.users.find_one({"email": "login@example.com"})["last_connection"] is not None


def test_login_wrong_password(client):
    client.post("/auth/register", json=user_payload(email="wrongpass@example.com"))
    response = client.post("/auth/login", json={"email": "wrongpass@example.com", "password": "Wrong1234"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Invalid credentials"


def test_login_nonexistent_user(client):
    response = client.post("/auth/login", json={"email": "ghost@example.com", "password": "Whatever1"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_session_authentication(client):
    client.post("/auth/register", json=user_payload(email="session@example.com"))
    client.cookies.clear()
    client.post("/auth/login", json={"email": "session@example.com", "password": USER_PASSWORD})

    response = client.get("/auth/test-hybrid")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["auth_method"] == "session"
    assert data["user"]["email"] == "session@example.com"


def test_jwt_authentication(client, register_user):
    user, token = register_user()
    response = client.get("/auth/test-hybrid", headers=auth(token))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["auth_method"] == "jwt"
    assert response.json()["user"]["id"] == user["id"]


def test_session_wins_over_token(client, register_user):
    _, other_token = register_user()
    client.post("/auth/register", json=user_payload(email="cookie@example.com"))

    response = client.get("/auth/test-hybrid", headers=auth(other_token))
    assert response.json()["auth_method"] == "session"
    assert response.json()["user"]["email"] == "cookie@example.com"


def test_unauthenticated(client):
    response = client.get("/auth/profile")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["detail"] == "Authentication required"


def test_invalid_token(client):
    response = client.get("/auth/profile", headers=auth("not-a-jwt"))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_for_deleted_user(client, register_user, raw_db):
    user, token = register_user()
    raw_db.users.delete_many({})
    response = client.get("/auth/profile", headers=auth(token))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_token_with_malformed_subject(client):
    token = create_access_token({"id": "not-an-object-id", "user_name": "x", "role": "user"})
    response = client.get("/auth/profile", headers=auth(token))
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_profile(client, register_user):
    user, token = register_user()
    response = client.get("/auth/profile", headers=auth(token))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == user["id"]
    assert "password_hash" not in response.json()


def test_logout_clears_session(client):
    client.post("/auth/register", json=user_payload())
    assert client.get("/auth/profile").status_code == status.HTTP_200_OK

    response = client.post("/auth/logout")
    assert response.status_code == status.HTTP_200_OK
    assert client.get("/auth/profile").status_code == status.HTTP_401_UNAUTHORIZED


def test_logout_without_session(client):
    assert client.post("/auth/logout").status_code == status.HTTP_200_OK


def test_login_rate_limited(client):
    app.state.limiter = Limiter(key_func=get_remote_address)
    try:
        codes = [
            client.post("/auth/login", json={"email": "ghost@example.com", "password": "Whatever1"}).status_code
            for _ in range(11)
        ]
    finally:
        app.state.limiter = disabled_limiter()
    assert codes[:10] == [status.HTTP_401_UNAUTHORIZED] * 10
    assert codes[10] == status.HTTP_429_TOO_MANY_REQUESTS


def test_request_id_header(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").headers.get("X-Request-ID")
