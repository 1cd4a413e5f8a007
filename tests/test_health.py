# tests/test_health.py

from fastapi.testclient import TestClient

from core.config import settings


def test_health_app(client: TestClient):
    response = client.get("/health/app")
    assert response.status_code == 200
    assert response.json() == {"service": settings.PROJECT_NAME, "status": "ok"}


def test_health_db_never_raises(client: TestClient):
    response = client.get("/health/db")
    assert response.status_code == 200
    assert response.json()["service"] == "MongoDB"


def test_root(client: TestClient):
    assert client.get("/").status_code == 200


def test_unknown_route_uses_detail_envelope(client: TestClient):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert "detail" in response.json()
