"""Tests for health check endpoints."""

import pytest


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client):
        """Health endpoint should return 200 with status."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["environment"] == "test"

    def test_health_response_structure(self, client):
        """Health response should have correct structure."""
        data = client.get("/health").json()
        assert set(data.keys()) == {"status", "timestamp", "environment"}

    def test_health_is_not_rate_limited(self, client, app):
        app.state.settings.api_rate_limit_requests = 1
        for _ in range(3):
            assert client.get("/health").status_code == 200

    def test_api_health_check(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_without_supabase(self, unconfigured_client):
        """Health stays up when authentication is not configured."""
        assert unconfigured_client.get("/health").status_code == 200


class TestApiIndex:
    def test_index(self, client):
        response = client.get("/api")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Aethea Medical Platform API"
        assert data["version"] == "1.0.0"
        assert data["endpoints"] == {
            "health": "/health",
            "auth": "/api/auth/*",
            "users": "/api/users/*",
        }
