"""Unit tests for the health check route."""

import pytest
from fastapi.testclient import TestClient

from ringrules.api.dependencies import get_runtime
from ringrules.api.server import create_app


@pytest.fixture
def client(runtime):
    app = create_app()
    app.dependency_overrides[get_runtime] = lambda: runtime
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_liveness_returns_healthy(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["version"] == "1.0.0"
    assert body["checks"] == {"scheduler": "stopped", "pending_events": "0"}


def test_health_needs_no_tenant(client):
    assert client.get("/health", headers={}).status_code == 200
