# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the application factory and health endpoints.

No database is configured, so the lifespan is not entered and the
database check reports unhealthy.
"""

import pytest
from fastapi.testclient import TestClient

from academia.api import create_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


class TestHealthEndpoints:
    """Tests for /health and /health/ready."""

    def test_health_without_database(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["database"]["status"] == "unhealthy"
        assert body["version"] == "1.0.0"

    def test_not_ready_without_service(self, client: TestClient) -> None:
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["ready"] is False
        assert body["checks"] == {"database": False, "placement_service": False}

    def test_placement_routes_require_service(self, client: TestClient) -> None:
        response = client.get("/api/v1/students/stu-1")

        # Authentication is checked before the service lookup.
        assert response.status_code == 401
