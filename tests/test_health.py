# tests/test_health.py
from fastapi.testclient import TestClient
from citynav.main import app


client = TestClient(app)


def test_health_check():
    response = client.get("/health/")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["app"] == "CityNav Route Planner API"
    assert "version" in data
    assert "environment" in data
