"""Health and readiness tests for the API."""

import pytest
from neo4j.exceptions import AuthError, ServiceUnavailable

from election_graph.graph.health import get_graph_health


class TestGraphHealth:
    """Test graph health check."""

    @pytest.mark.asyncio
    async def test_reachable(self, graph_client, fake_driver):
        health = await get_graph_health(graph_client)

        assert health["reachable"] is True
        assert isinstance(health["latency_ms"], int)
        assert "error" not in health
        assert fake_driver.sessions[0].close_calls == 1

    @pytest.mark.asyncio
    async def test_unreachable(self, graph_client, fake_driver):
        fake_driver.queue(ServiceUnavailable("Unable to retrieve routing information"))

        health = await get_graph_health(graph_client)

        assert health["reachable"] is False
        assert health["latency_ms"] is None
        assert health["error"] == "Unable to retrieve routing information"
        assert fake_driver.sessions[0].close_calls == 1

    @pytest.mark.asyncio
    async def test_bad_credentials(self, graph_client, fake_driver):
        fake_driver.queue(AuthError("The client is unauthorized due to authentication failure."))

        health = await get_graph_health(graph_client)

        assert health["reachable"] is False


class TestHealthEndpoints:
    """Test /health and /ready."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ready(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["database"]["reachable"] is True

    def test_ready_when_database_down(self, client, fake_driver):
        fake_driver.queue(ServiceUnavailable("Connection refused"))

        response = client.get("/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "down"
        assert data["database"]["error"] == "Connection refused"
