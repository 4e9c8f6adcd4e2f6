"""Tests for health check endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient

from api import app


client = TestClient(app)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self):
        """Health endpoint should return 200 with status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert set(data.keys()) == {"status", "version"}

    @patch("api.routes.health.get_settings")
    def test_health_reports_configured_version(self, mock_settings):
        mock_settings.return_value.app_version = "2.3.4"
        response = client.get("/api/health")
        assert response.json()["version"] == "2.3.4"

    @patch("api.routes.health.get_settings")
    def test_ready_when_configured(self, mock_settings):
        """Readiness is reported when Supabase and Groq are configured."""
        mock_settings.return_value.supabase_url = "https://project.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "service-key"
        mock_settings.return_value.groq_api_key = "gsk-test"

        response = client.get("/api/ready")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "database": "configured",
            "providers": "configured",
        }

    @patch("api.routes.health.get_settings")
    def test_not_ready_without_model_key(self, mock_settings):
        mock_settings.return_value.supabase_url = "https://project.supabase.co"
        mock_settings.return_value.supabase_service_role_key = "service-key"
        mock_settings.return_value.groq_api_key = ""

        data = client.get("/api/ready").json()

        assert data["status"] == "not_ready"
        assert data["database"] == "configured"
        assert data["providers"] == "not_configured"
