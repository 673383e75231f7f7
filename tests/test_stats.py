"""
Tests for public statistics and health checks
"""
from fastapi import status

from adoptme.db import get_db
from adoptme.main import app
from conftest import auth


def test_health(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "AdoptMe API"
    assert data["timestamp"]


def test_health_detailed(client):
    response = client.get("/health/detailed")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["database"]["status"] == "connected"


def test_health_detailed_database_down(client):
    class DownDatabase:
        async def command(self, name):
            raise ConnectionError("connection refused")

    app.dependency_overrides[get_db] = lambda: DownDatabase()
    response = client.get("/health/detailed")
    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
    assert response.json()["status"] == "unhealthy"
    assert response.json()["database"]["status"] == "disconnected"


def test_empty_stats(client):
    data = client.get("/stats").json()
    assert set(data.values()) == {0}
    assert client.get("/stats/adoptions").json() == {
        "total_adoptions": 0,
        "pending_adoptions": 0,
        "happy_families": 0,
    }


def test_stats_after_activity(client, create_pet, register_user, admin):
    pet = create_pet()
    create_pet(name="Second")
    _, token = register_user()
    _, other_token = register_user()
    approved = client.post("/adoptions", json={"pet": pet["id"]}, headers=auth(token)).json()
    client.post("/adoptions", json={"pet": pet["id"]}, headers=auth(other_token))
    client.patch(f"/adoptions/{approved['id']}/status", json={"status": "approved"}, headers=auth(admin[1]))

    data = client.get("/stats").json()
    assert data["total_users"] == 3
    assert data["total_pets"] == 2
    assert data["available_pets"] == 1
    assert data["adopted_pets"] == 1
    assert data["total_adoptions"] == 2
    assert data["approved_adoptions"] == 1
    assert data["rejected_adoptions"] == 1
    assert data["pending_adoptions"] == 0
    assert data["total_notifications"] > 0

    summary = client.get("/stats/adoptions").json()
    assert summary == {"total_adoptions": 2, "pending_adoptions": 0, "happy_families": 1}
