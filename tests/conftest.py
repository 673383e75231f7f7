"""
pytest configuration: in-memory database, app client and user helpers
"""
import itertools
import os
import tempfile
from datetime import datetime

os.environ.setdefault("MEDIA_DIR", tempfile.mkdtemp(prefix="adoptme-media-"))
os.environ.setdefault("APP_ENV", "dev")
os.environ.setdefault("NOTIFY_ON_NEW_PET", "1")

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient
from slowapi import Limiter
from slowapi.util import get_remote_address

from adoptme.main import app
from adoptme.db import get_db
from adoptme.security import hash_password, create_access_token, session_user

USER_PASSWORD = "Secret123"
ADMIN_PASSWORD = "Admin123!"


# -------- fixtures --------

@pytest.fixture
def db():
    """In-memory Motor-compatible database"""
    return AsyncMongoMockClient()["adoptme_test"]


@pytest.fixture
def raw_db(db):
    """Synchronous mongomock handle on the same data, for arranging and asserting on stored documents"""
    raw = db.delegate
    raw.users.create_index("email", unique=True)
    raw.users.create_index("user_name", unique=True)
    return raw


def disabled_limiter() -> Limiter:
    return Limiter(key_func=get_remote_address, enabled=False)


@pytest.fixture
def client(db, raw_db):
    app.dependency_overrides[get_db] = lambda: db
    # no rate limiting in tests
    app.state.limiter = disabled_limiter()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def api(db, raw_db):
    """The app with the database overridden, for httpx AsyncClient tests"""
    app.dependency_overrides[get_db] = lambda: db
    app.state.limiter = disabled_limiter()
    yield app
    app.dependency_overrides.clear()


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


_ids = itertools.count(1)


def user_payload(**overrides) -> dict:
    n = next(_ids)
    data = {
        "user_name": f"user{n}",
        "first_name": "Test",
        "last_name": f"User{n}",
        "email": f"user{n}@example.com",
        "age": 30,
        "password": USER_PASSWORD,
    }
    data.update(overrides)
    return data


@pytest.fixture
def register_user(client):
    """Registers a regular user and returns (session user, token); the session cookie is dropped."""
    def _register(**overrides):
        response = client.post("/auth/register", json=user_payload(**overrides))
        assert response.status_code == 201, response.text
        client.cookies.clear()
        body = response.json()
        return body["user"], body["access_token"]
    return _register


@pytest.fixture
def admin(raw_db):
    """An admin stored directly in the database, returned as (session user, token)"""
    now = datetime.utcnow()
    doc = {
        "user_name": "root",
        "first_name": "Ada",
        "last_name": "Admin",
        "email": "root@example.com",
        "password_hash": hash_password(ADMIN_PASSWORD),
        "age": 40,
        "role": "admin",
        "is_email_verified": True,
        "documents": [],
        "last_connection": None,
        "created_at": now,
        "updated_at": now,
    }
    raw_db.users.insert_one(doc)
    return session_user(doc), create_access_token(doc)


@pytest.fixture
def create_pet(client, admin):
    def _create(**overrides):
        data = {
            "name": "Luna",
            "breed": "Labrador",
            "age": 2,
            "species": "dog",
            "gender": "female",
            "description": "Friendly and calm",
            "characteristics": ["friendly"],
        }
        data.update(overrides)
        response = client.post("/pets", json=data, headers=auth(admin[1]))
        assert response.status_code == 201, response.text
        return response.json()
    return _create
