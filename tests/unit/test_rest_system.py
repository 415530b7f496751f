"""
Unit tests for system endpoints, middleware and error handling.
"""

from unittest.mock import patch

from fastapi.testclient import TestClient

from flowgraph.api.main import create_app
from flowgraph.config.app_config import Settings


class TestInfoEndpoints:
    """Test the unauthenticated information endpoints."""

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["endpoints"]["graphql"] == "/graphql"
        assert body["data"]["endpoints"]["health"] == "/api/health"

    def test_api_info(self, client):
        response = client.get("/api/")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Flowgraph API"
        assert data["endpoints"]["rest"]["nodes"] == "/api/nodes"


class TestHealthEndpoint:
    """Test GET /api/health."""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "OK"
        assert data["environment"] == "test"
        assert data["version"] == "1.0.0"
        assert isinstance(data["uptime"], float)
        assert data["database"]["connected"] is True
        assert data["database"]["totalRecords"] == 12
        assert sorted(data["database"]["collections"]) == [
            "actions",
            "nodes",
            "resourceTemplates",
            "responses",
            "triggers",
        ]

    def test_health_before_load(self, settings, auth_service):
        """Test that health reports a store that has not been loaded."""
        from flowgraph.store.records import RecordStore

        app = create_app(settings=settings, store=RecordStore(settings.DATA_PATH), auth_service=auth_service)
        response = TestClient(app).get("/api/health")

        assert response.status_code == 200
        assert response.json()["data"]["database"] == {"connected": False, "collections": [], "totalRecords": 0}


class TestStatsEndpoint:
    """Test GET /api/stats."""

    def test_requires_authentication(self, client):
        response = client.get("/api/stats")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTHENTICATION_REQUIRED"

    def test_stats(self, client, auth_headers):
        response = client.get("/api/stats", headers=auth_headers["guest"])

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["nodes"]["count"] == 3
        assert data["responses"]["exists"] is True
        assert "lastUpdated" in data
        assert "uptime" in data["server"]


class TestErrorHandling:
    """Test error envelopes."""

    def test_unknown_route(self, client):
        response = client.get("/api/unknown")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "RESOURCE_NOT_FOUND"
        assert body["error"]["message"] == "Route not found: GET /api/unknown"
        assert body["path"] == "/api/unknown"
        assert body["method"] == "GET"

    def test_unexpected_error_is_masked(self, app, auth_headers):
        """Test that internal details are hidden outside development."""
        client = TestClient(app, raise_server_exceptions=False)

        with patch("flowgraph.api.rest.nodes.node_stats", side_effect=RuntimeError("disk on fire")):
            response = client.get("/api/nodes/stats", headers=auth_headers["user"])

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert error["message"] == "Internal server error"
        assert "details" not in error

    def test_unexpected_error_is_shown_in_development(self, data_dir, record_store, auth_service, auth_headers):
        settings = Settings(_env_file=None, ENVIRONMENT="development", DATA_PATH=str(data_dir))
        app = create_app(settings=settings, store=record_store, auth_service=auth_service)
        client = TestClient(app, raise_server_exceptions=False)

        with patch("flowgraph.api.rest.nodes.node_stats", side_effect=RuntimeError("disk on fire")):
            response = client.get("/api/nodes/stats", headers=auth_headers["user"])

        assert response.status_code == 500
        assert response.json()["error"]["message"] == "disk on fire"
        assert response.json()["error"]["details"] == {"type": "RuntimeError"}


class TestMiddleware:
    """Test response headers."""

    def test_security_headers(self, client):
        response = client.get("/api/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-API-Version"] == "1.0.0"
        assert "Strict-Transport-Security" not in response.headers

    def test_process_time_header(self, client):
        response = client.get("/api/health")

        assert float(response.headers["X-Process-Time"]) >= 0

    def test_security_headers_disabled(self, data_dir, record_store, auth_service):
        settings = Settings(_env_file=None, ENVIRONMENT="test", DATA_PATH=str(data_dir), SECURITY_HEADERS_ENABLED=False)
        app = create_app(settings=settings, store=record_store, auth_service=auth_service)

        response = TestClient(app).get("/api/health")

        assert "X-Frame-Options" not in response.headers

    def test_lifespan_loads_store(self, settings, auth_service):
        """Test that the store is loaded on startup when it was not injected loaded."""
        app = create_app(settings=settings, auth_service=auth_service)

        with TestClient(app) as client:
            response = client.get("/api/health")

        assert response.json()["data"]["database"]["connected"] is True
        assert app.state.store.initialized is True

    def test_cors_credentials_for_listed_origins(self, data_dir, record_store, auth_service):
        settings = Settings(_env_file=None, ENVIRONMENT="test", DATA_PATH=str(data_dir), CORS_ORIGINS="http://ui.test")
        client = TestClient(create_app(settings=settings, store=record_store, auth_service=auth_service))

        response = client.get("/api/health", headers={"Origin": "http://ui.test"})

        assert response.headers["Access-Control-Allow-Origin"] == "http://ui.test"
        assert response.headers["Access-Control-Allow-Credentials"] == "true"

    def test_wildcard_cors_omits_credentials(self, data_dir, record_store, auth_service):
        settings = Settings(_env_file=None, ENVIRONMENT="test", DATA_PATH=str(data_dir), CORS_ORIGINS="*")
        client = TestClient(create_app(settings=settings, store=record_store, auth_service=auth_service))

        response = client.get("/api/health", headers={"Origin": "http://ui.test"})

        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert "Access-Control-Allow-Credentials" not in response.headers
