"""
Integration tests for health and readiness endpoints.
"""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from hotel_dashboard.dependencies import get_properties
from hotel_dashboard.main import app
from hotel_dashboard.models.properties import Property


@pytest.fixture
def client() -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.mark.integration
def test_health_endpoint_returns_ok(client: TestClient) -> None:
    """Test that /health endpoint returns 200 with status ok."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_readiness_endpoint_returns_ready_with_properties(
    client: TestClient, property_a: Property, property_b: Property
) -> None:
    """Test that /ready returns 200 once properties are configured."""
    app.dependency_overrides[get_properties] = lambda: [property_a, property_b]

    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json() == {"status": "ready", "checks": {"properties": 2}}


@pytest.mark.integration
def test_readiness_endpoint_returns_503_without_properties(client: TestClient) -> None:
    """Test that /ready returns 503 when no property is configured."""
    app.dependency_overrides[get_properties] = lambda: []

    response = client.get("/ready")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not ready"
    assert data["checks"]["properties"] == 0


@pytest.mark.integration
def test_health_endpoint_ok_without_properties(client: TestClient) -> None:
    """/health only reports on the process; configuration is /ready's concern."""
    app.dependency_overrides[get_properties] = lambda: []

    response = client.get("/health")

    assert response.status_code == 200
