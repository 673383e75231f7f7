"""
Tests for user management endpoints
"""
from pathlib import Path

import pytest
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from fastapi import status

from adoptme.config import get_settings
from adoptme.services import users as users_service
from conftest import auth, user_payload, USER_PASSWORD


def test_admin_creates_user_with_role(client, admin):
    response = client.post(
        "/users",
        json=user_payload(email="staff@example.com", role="admin"),
        headers=auth(admin[1]),
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["role"] == "admin"
    assert data["documents"] == []
    assert "password_hash" not in data


def test_create_user_requires_admin(client, register_user):
    _, token = register_user()
    response = client.post("/users", json=user_payload(), headers=auth(token))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_admin_create_duplicate(client, admin):
    payload = user_payload(email="twice@example.com")
    client.post("/users", json=payload, headers=auth(admin[1]))
    response = client.post("/users", json=payload, headers=auth(admin[1]))
    assert response.status_code == status.HTTP_409_CONFLICT


def test_list_users_paginated(client, admin, register_user):
    for _ in range(3):
        register_user()

    response = client.get("/users?page=1&limit=2", headers=auth(admin[1]))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data["data"]) == 2
    assert data["pagination"] == {"total": 4, "page": 1, "limit": 2, "total_pages": 2}

    response = client.get("/users?role=admin", headers=auth(admin[1]))
    assert [u["email"] for u in response.json()["data"]] == ["root@example.com"]


def test_list_users_requires_admin(client, register_user):
    _, token = register_user()
    assert client.get("/users", headers=auth(token)).status_code == status.HTTP_403_FORBIDDEN


def test_get_my_profile(client, register_user):
    user, token = register_user()
    response = client.get("/users/profile/me", headers=auth(token))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["email"] == user["email"]


def test_update_my_profile(client, register_user):
    _, token = register_user()
    response = client.patch("/users/profile/me", json={"first_name": "Renamed", "age": 44}, headers=auth(token))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["first_name"] == "Renamed"
    assert response.json()["age"] == 44

    response = client.put("/users/profile/me", json={"last_name": "Again"}, headers=auth(token))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["first_name"] == "Renamed"
    assert response.json()["last_name"] == "Again"


def test_update_email_collision(client, register_user):
    other, _ = register_user()
    _, token = register_user()
    response = client.patch("/users/profile/me", json={"email": other["email"]}, headers=auth(token))
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.patch("/users/profile/me", json={"user_name": other["user_name"]}, headers=auth(token))
    assert response.status_code == status.HTTP_409_CONFLICT


def test_update_keeps_own_email(client, register_user):
    user, token = register_user()
    response = client.patch("/users/profile/me", json={"email": user["email"]}, headers=auth(token))
    assert response.status_code == status.HTTP_200_OK


def test_password_change_is_rehashed(client, register_user, raw_db):
    user, token = register_user()
    response = client.patch("/users/profile/me", json={"password": "BrandNew99"}, headers=auth(token))
    assert response.status_code == status.HTTP_200_OK
    assert raw_db.users.find_one({"_id": ObjectId(user["id"])})["password_hash"] != "BrandNew99"

    old = client.post("/auth/login", json={"email": user["email"], "password": USER_PASSWORD})
    assert old.status_code == status.HTTP_401_UNAUTHORIZED
    new = client.post("/auth/login", json={"email": user["email"], "password": "BrandNew99"})
    assert new.status_code == status.HTTP_200_OK


def test_update_rejects_weak_password(client, register_user):
    _, token = register_user()
    response = client.patch("/users/profile/me", json={"password": "weak"}, headers=auth(token))
    assert response.status_code == 422


def test_get_user_by_id_self_or_admin(client, admin, register_user):
    user, token = register_user()
    _, stranger_token = register_user()

    assert client.get(f"/users/{user['id']}", headers=auth(token)).status_code == status.HTTP_200_OK
    assert client.get(f"/users/{user['id']}", headers=auth(admin[1])).status_code == status.HTTP_200_OK
    assert client.get(f"/users/{user['id']}", headers=auth(stranger_token)).status_code == status.HTTP_403_FORBIDDEN


def test_update_user_by_id(client, admin, register_user):
    user, token = register_user()
    _, stranger_token = register_user()

    response = client.patch(f"/users/{user['id']}", json={"first_name": "ByAdmin"}, headers=auth(admin[1]))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["first_name"] == "ByAdmin"

    response = client.put(f"/users/{user['id']}", json={"first_name": "Nope"}, headers=auth(stranger_token))
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_get_unknown_user(client, admin):
    assert client.get(f"/users/{ObjectId()}", headers=auth(admin[1])).status_code == status.HTTP_404_NOT_FOUND
    assert client.get("/users/not-an-id", headers=auth(admin[1])).status_code == status.HTTP_400_BAD_REQUEST


def test_delete_user(client, admin, register_user):
    user, token = register_user()
    assert client.delete(f"/users/{user['id']}", headers=auth(token)).status_code == status.HTTP_403_FORBIDDEN

    response = client.delete(f"/users/{user['id']}", headers=auth(admin[1]))
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "User deleted successfully", "id": user["id"]}

    response = client.delete(f"/users/{user['id']}", headers=auth(admin[1]))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_upload_documents(client, register_user, raw_db):
    user, token = register_user()
    files = [
        ("files", ("id-card.pdf", b"%PDF-1.4 fake", "application/pdf")),
        ("files", ("proof.txt", b"address proof", "text/plain")),
    ]
    response = client.post(f"/users/{user['id']}/documents", files=files, headers=auth(token))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["documents_count"] == 2
    docs = data["user"]["documents"]
    assert [d["name"] for d in docs] == ["id-card.pdf", "proof.txt"]
    assert all(d["reference"].startswith("/media/documents/") for d in docs)
    assert docs[1]["size"] == len(b"address proof")
    assert len(raw_db.users.find_one({"_id": ObjectId(user["id"])})["documents"]) == 2


def test_upload_documents_limits(client, register_user):
    user, token = register_user()
    too_many = [("files", (f"doc{i}.pdf", b"x", "application/pdf")) for i in range(6)]
    response = client.post(f"/users/{user['id']}/documents", files=too_many, headers=auth(token))
    assert response.status_code == status.HTTP_400_BAD_REQUEST

    bad_type = [("files", ("run.exe", b"MZ", "application/octet-stream"))]
    response = client.post(f"/users/{user['id']}/documents", files=bad_type, headers=auth(token))
    assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


def _stored_documents() -> set:
    return {p.name for p in (Path(get_settings().media_dir) / "documents").iterdir()}


def test_upload_documents_bad_file_writes_nothing(client, register_user, raw_db):
    user, token = register_user()
    before = _stored_documents()
    files = [
        ("files", ("ok.pdf", b"%PDF-1.4 fine", "application/pdf")),
        ("files", ("bad.exe", b"MZ", "application/octet-stream")),
    ]
    response = client.post(f"/users/{user['id']}/documents", files=files, headers=auth(token))
    assert response.status_code == status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    assert _stored_documents() == before
    assert raw_db.users.find_one({"_id": ObjectId(user["id"])})["documents"] == []


def test_upload_documents_oversize_removes_earlier_files(client, register_user, raw_db, monkeypatch):
    monkeypatch.setattr(users_service, "MAX_DOCUMENT_BYTES", 8)
    user, token = register_user()
    before = _stored_documents()
    files = [
        ("files", ("small.pdf", b"tiny", "application/pdf")),
        ("files", ("big.pdf", b"far too many bytes", "application/pdf")),
    ]
    response = client.post(f"/users/{user['id']}/documents", files=files, headers=auth(token))
    assert response.status_code == 413
    assert _stored_documents() == before
    assert raw_db.users.find_one({"_id": ObjectId(user["id"])})["documents"] == []


def test_upload_documents_for_someone_else(client, register_user):
    user, _ = register_user()
    _, stranger_token = register_user()
    files = [("files", ("doc.pdf", b"x", "application/pdf"))]
    response = client.post(f"/users/{user['id']}/documents", files=files, headers=auth(stranger_token))
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_create_and_list_users_async(api, admin):
    transport = ASGITransport(app=api)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        resp = await ac.post("/users", json=user_payload(email="ana@example.com"), headers=auth(admin[1]))
        assert resp.status_code == 201

        resp = await ac.get("/users", headers=auth(admin[1]))
        assert resp.status_code == 200
        assert any(u["email"] == "ana@example.com" for u in resp.json()["data"])
