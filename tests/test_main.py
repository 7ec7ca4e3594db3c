"""
Tests for application wiring: health endpoints, status, the /api alias
and the shared error envelope.
"""

import logging

from fastapi.testclient import TestClient

from lacr.core.config import settings
from lacr.core.errors import Internal
from lacr.core.identity import identity_verifier


class TestHealth:
    """Tests for /health and /ping."""

    def test_health(self, client: TestClient):
        """Should answer the platform probe without touching anything else."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ping(self, client: TestClient):
        assert client.get("/ping").json() == {"success": True, "message": "pong"}


class TestStatus:
    """Tests for /status."""

    def test_status_online(self, client: TestClient):
        """Should report the service online with a timestamp."""
        body = client.get("/status").json()

        assert body["success"] is True
        assert body["status"] == "online"
        assert body["timestamp"]

    def test_detailed_status(self, client: TestClient):
        """Should include service metadata and a non-negative uptime."""
        body = client.get("/status/detailed").json()

        assert body["service"] == settings.APP_NAME
        assert body["version"] == settings.APP_VERSION
        assert body["uptime_seconds"] >= 0


class TestApiAlias:
    """Every router is also served under /api."""

    def test_alias_reaches_same_handler(self, client: TestClient, unclaimed_robot):
        """Should return the same robot from both paths."""
        root = client.get(f"/esp32/status/{unclaimed_robot.robot_id}")
        aliased = client.get(f"/api/esp32/status/{unclaimed_robot.robot_id}")

        assert root.status_code == aliased.status_code == 200
        assert root.json()["robot"]["robot_id"] == aliased.json()["robot"]["robot_id"]

    def test_alias_error_envelope(self, client: TestClient):
        """Should produce the usual error body under /api."""
        response = client.get("/api/esp32/status/ghost")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Robot not found"}

    def test_alias_hidden_from_schema(self, client: TestClient):
        """Should leave the /api copies out of the OpenAPI document."""
        paths = client.get("/openapi.json").json()["paths"]

        assert "/esp32/setup" in paths
        assert not any(path.startswith("/api/") for path in paths)


class TestErrorEnvelope:
    """Tests for the shared {"success": false, "error": ...} body."""

    def test_unknown_route(self, client: TestClient):
        """Should answer unknown paths with 'Route not found'."""
        response = client.get("/no/such/route")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Route not found"}

    def test_validation_error_is_400(self, client: TestClient):
        """Should turn body validation errors into 400 with details."""
        response = client.post("/esp32/setup", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["details"]

    def test_internal_error_is_generic(self, client: TestClient, monkeypatch, caplog):
        """Should hide Internal messages from callers and log them with a traceback."""
        def misconfigured(token: str):
            raise Internal("Firebase credentials are not configured")

        monkeypatch.setattr(identity_verifier, "verify", misconfigured)
        # The lacr tree does not propagate to root, so hook caplog in directly
        errors_logger = logging.getLogger("lacr.errors")
        errors_logger.addHandler(caplog.handler)
        try:
            response = client.post("/auth/verify", headers={"Authorization": "Bearer anything"})
        finally:
            errors_logger.removeHandler(caplog.handler)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Something went wrong!"}
        records = [r for r in caplog.records if r.name == "lacr.errors"]
        assert records and records[-1].exc_info is not None
        assert "Firebase credentials are not configured" in records[-1].getMessage()
