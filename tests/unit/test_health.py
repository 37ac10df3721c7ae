"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_healthz_endpoint():
    """Test the basic health check endpoint."""
    response = client.get("/healthz")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"


def test_api_health_endpoint():
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "neo4j-communication-api"
    assert "timestamp" in data


def test_readyz_endpoint_all_services_healthy():
    """Test readiness endpoint when Neo4j is reachable and configured."""
    with (
        patch(
            "app.routes.health.neo4j_health_check",
            new=AsyncMock(return_value={"healthy": True, "service": "neo4j", "database": "neo4j"}),
        ),
        patch("app.config.settings.NEO4J_PASSWORD", "secret"),
    ):
        response = client.get("/readyz")

        assert response.status_code == 200
        data = response.json()
        assert data["overall_ok"] is True
        assert data["checks"]["neo4j"]["ok"] is True
        assert data["checks"]["neo4j"]["database"] == "neo4j"
        assert data["checks"]["configuration"]["ok"] is True


def test_readyz_endpoint_neo4j_unhealthy():
    """Test readiness endpoint when Neo4j is down."""
    with (
        patch(
            "app.routes.health.neo4j_health_check",
            new=AsyncMock(
                return_value={
                    "healthy": False,
                    "service": "neo4j",
                    "error": "Connection refused",
                    "error_type": "ServiceUnavailable",
                }
            ),
        ),
        patch("app.config.settings.NEO4J_PASSWORD", "secret"),
    ):
        response = client.get("/readyz")

        # Should still return 200, but overall_ok should be False
        assert response.status_code == 200
        data = response.json()
        assert data["overall_ok"] is False
        assert data["checks"]["neo4j"]["ok"] is False
        assert data["checks"]["neo4j"]["error"] == "Connection refused"
        assert data["checks"]["neo4j"]["error_type"] == "ServiceUnavailable"


def test_readyz_endpoint_health_check_raises():
    with (
        patch("app.routes.health.neo4j_health_check", new=AsyncMock(side_effect=RuntimeError("boom"))),
        patch("app.config.settings.NEO4J_PASSWORD", "secret"),
    ):
        response = client.get("/readyz")

        data = response.json()
        assert data["overall_ok"] is False
        assert data["checks"]["neo4j"]["error"] == "RuntimeError: boom"
        assert isinstance(data["checks"]["neo4j"]["latency_ms"], (int, float))


def test_readyz_endpoint_missing_password():
    """Test readiness endpoint when the Neo4j password is missing."""
    with (
        patch(
            "app.routes.health.neo4j_health_check",
            new=AsyncMock(return_value={"healthy": True, "service": "neo4j", "database": "neo4j"}),
        ),
        patch("app.config.settings.NEO4J_PASSWORD", None),
    ):
        response = client.get("/readyz")

        data = response.json()
        assert data["overall_ok"] is False
        assert data["checks"]["configuration"]["ok"] is False
        assert "NEO4J_PASSWORD not set" in data["checks"]["configuration"]["issues"]


def test_responses_carry_request_id():
    response = client.get("/healthz", headers={"X-Request-ID": "dashboard-123"})

    assert response.headers["x-request-id"] == "dashboard-123"


def test_malformed_request_id_is_replaced():
    response = client.get("/healthz", headers={"X-Request-ID": "not valid!"})

    assert response.headers["x-request-id"] != "not valid!"
    assert len(response.headers["x-request-id"]) == 36
