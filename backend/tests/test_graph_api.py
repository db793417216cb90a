"""Tests for the election graph HTTP endpoints."""

import logging
from unittest.mock import patch

from fastapi.testclient import TestClient
from neo4j.exceptions import ClientError, ServiceUnavailable, SessionExpired

from election_graph.core.config import settings
from election_graph.core.errors import GENERIC_ERROR_MESSAGE
from election_graph.graph import queries
from election_graph.main import create_app


class TestRunCypher:
    """Test POST /run-cypher."""

    def test_empty_body_defaults_type_and_returns_empty_list(self, client, fake_driver):
        response = client.post("/run-cypher", json={})

        assert response.status_code == 200
        assert response.json() == []
        assert fake_driver.statements[0][1] == {"type": "PRESIDENT"}

    def test_missing_body_defaults_type(self, client, fake_driver):
        response = client.post("/run-cypher")

        assert response.status_code == 200
        assert fake_driver.statements[0][1] == {"type": "PRESIDENT"}

    def test_blank_type_defaults(self, client, fake_driver):
        client.post("/run-cypher", json={"type": "  "})
        assert fake_driver.statements[0][1] == {"type": settings.DEFAULT_ELECTION_TYPE}

    def test_explicit_type_bound(self, client, fake_driver):
        fake_driver.queue([{"year": 2018, "party": "REPUBLICAN", "candidate_votes": 1_200_000}])

        response = client.post("/run-cypher", json={"type": "SENATE"})

        assert response.status_code == 200
        assert response.json() == [{"year": 2018, "party": "REPUBLICAN", "candidate_votes": 1_200_000}]
        assert fake_driver.statements[0][1] == {"type": "SENATE"}

    def test_non_string_type_rejected(self, client, fake_driver):
        response = client.post("/run-cypher", json={"type": 5})

        assert response.status_code == 400
        assert "type" in response.json()["error"]
        assert fake_driver.statements == []


class TestDropProjection:
    """Test POST /dropprojection."""

    def test_drop_success_plain_text(self, client, fake_driver):
        response = client.post("/dropprojection", json={"projection": "betweenGraph"})

        assert response.status_code == 200
        assert response.text == "Projection dropped"
        assert response.headers["content-type"].startswith("text/plain")
        assert fake_driver.statements == [("CALL gds.graph.drop($projection)", {"projection": "betweenGraph"})]

    def test_missing_projection_is_bad_request(self, client, fake_driver):
        response = client.post("/dropprojection", json={})

        assert response.status_code == 400
        assert "projection" in response.json()["error"]
        assert fake_driver.sessions == []

    def test_blank_projection_is_bad_request(self, client):
        response = client.post("/dropprojection", json={"projection": " "})
        assert response.status_code == 400

    def test_projection_name_bound_verbatim(self, client, fake_driver):
        response = client.post("/dropprojection", json={"projection": " betweenGraph"})

        assert response.status_code == 200
        assert fake_driver.statements[0][1] == {"projection": " betweenGraph"}

    def test_unknown_projection_returns_driver_message(self, client, fake_driver):
        message = "Failed to invoke procedure `gds.graph.drop`: Graph with name `betweenGraph` does not exist"
        fake_driver.queue(ClientError(message))

        response = client.post("/dropprojection", json={"projection": "betweenGraph"})

        assert response.status_code == 500
        body = response.json()
        assert set(body) == {"error"}
        assert message in body["error"]
        assert fake_driver.sessions[0].close_calls == 1


class TestAnalyticsEndpoints:
    """Test GDS-backed GET endpoints."""

    def test_candidate_predictions(self, client, fake_driver):
        fake_driver.queue([
            {"candidate1": "ADAMS, JOHN", "candidate2": "JEFFERSON, THOMAS", "probability": 0.91},
            {"candidate1": "BURR, AARON", "candidate2": None, "probability": 0.4},
        ])

        response = client.get("/candidate-predictions")

        assert response.status_code == 200
        assert response.json() == [
            {"candidate1": "ADAMS, JOHN", "candidate2": "JEFFERSON, THOMAS", "probability": 0.91},
            {"candidate1": "BURR, AARON", "candidate2": None, "probability": 0.4},
        ]

    def test_candidates_recreates_projection_in_one_session(self, client, fake_driver):
        fake_driver.queue([], [{"graphName": queries.DEGREE_GRAPH}], [{"name": "A", "score": 2.0}])

        response = client.get("/candidates")

        assert response.status_code == 200
        assert response.json() == [{"name": "A", "score": 2.0}]
        assert len(fake_driver.sessions) == 1
        assert len(fake_driver.statements) == 3

    def test_betweenness(self, client, fake_driver):
        fake_driver.queue([], [], [{"name": "B", "score": 12.5}])

        response = client.get("/betweenness")

        assert response.json() == [{"name": "B", "score": 12.5}]

    def test_project_components_graph(self, client, fake_driver):
        fake_driver.queue([], [{"graphName": "componentsGraph", "nodeCount": 5, "relationshipCount": 4}])

        response = client.get("/project-components-graph")

        assert response.status_code == 200
        assert "componentsGraph" in response.json()["message"]

    def test_wcc_components(self, client, fake_driver):
        fake_driver.queue([{"Candidate": "A", "ComponentId": 0}, {"Candidate": "B", "ComponentId": 0}])

        response = client.get("/wcc-components")

        assert response.json() == [{"Candidate": "A", "ComponentId": 0}, {"Candidate": "B", "ComponentId": 0}]
        assert fake_driver.statements[0][1]["limit"] == 10

    def test_wcc_without_projection_fails(self, client, fake_driver):
        fake_driver.queue(ClientError("Graph with name `componentsGraph` does not exist"))

        response = client.get("/wcc-components")

        assert response.status_code == 500
        assert "componentsGraph" in response.json()["error"]


class TestCountEndpoints:
    """Test graph size endpoints."""

    def test_total_nodes_empty_database(self, client, fake_driver):
        fake_driver.queue([{"totalNodes": 0}])

        response = client.get("/total-nodes")

        assert response.status_code == 200
        assert response.json() == {"totalNodes": 0}

    def test_total_relationships(self, client, fake_driver):
        fake_driver.queue([{"totalRelationships": 2**40}])
        assert client.get("/total-relationships").json() == {"totalRelationships": 2**40}

    def test_isolated_nodes(self, client, fake_driver):
        fake_driver.queue([{"isolatedNodes": 3}])
        assert client.get("/isolated-nodes").json() == {"isolatedNodes": 3}

    def test_node_count(self, client, fake_driver):
        fake_driver.queue([{"NodeType": ["Candidate"], "TotalCount": 10}])
        assert client.get("/node-count").json() == [{"NodeType": ["Candidate"], "TotalCount": 10}]


class TestErrorShape:
    """Test the error envelope across failure kinds."""

    def test_connectivity_failure(self, client, fake_driver):
        fake_driver.queue(ServiceUnavailable("Couldn't connect to localhost:7687"))

        response = client.get("/total-nodes")

        assert response.status_code == 500
        assert response.json() == {"error": "Couldn't connect to localhost:7687"}

    def test_details_hidden_when_disabled(self, client, fake_driver):
        fake_driver.queue(ServiceUnavailable("Couldn't connect to db.internal:7687"))

        with patch.object(settings, "EXPOSE_ERROR_DETAILS", False):
            response = client.get("/total-nodes")

        assert response.status_code == 500
        assert response.json() == {"error": GENERIC_ERROR_MESSAGE}

    def test_timeout(self, client, fake_driver):
        fake_driver.delay = 1

        with patch.object(settings, "QUERY_TIMEOUT_SECONDS", 0.05):
            response = client.get("/total-nodes")

        assert response.status_code == 504
        assert "timed out" in response.json()["error"]
        assert fake_driver.sessions[0].close_calls == 1

    def test_unknown_route(self, client):
        response = client.get("/no-such-route")

        assert response.status_code == 404
        assert "error" in response.json()

    def test_request_id_echoed(self, client):
        response = client.post("/run-cypher", json={}, headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_session_expired_message_returned(self, client, fake_driver):
        fake_driver.queue(SessionExpired("Session expired: leader switched"))

        response = client.get("/total-nodes")

        assert response.status_code == 500
        assert response.json() == {"error": "Session expired: leader switched"}

    def test_cors_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "http://example.test"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestRequestLogging:
    """Test that query log lines are tied to the request that ran them."""

    def test_failure_log_carries_request_id(self, client, fake_driver, caplog):
        fake_driver.queue(SessionExpired("Session expired: leader switched"))

        with caplog.at_level(logging.INFO):
            client.get("/total-nodes", headers={"X-Request-ID": "req-42"})

        [failure] = [r for r in caplog.records if r.name == "election_graph.graph.executor"]
        assert failure.request_id == "req-42"
        assert "leader switched" in failure.getMessage()

    def test_query_log_carries_request_id(self, client, fake_driver, caplog):
        fake_driver.queue([{"totalNodes": 4}])

        with caplog.at_level(logging.INFO):
            client.get("/total-nodes", headers={"X-Request-ID": "req-7"})

        [query] = [r for r in caplog.records if r.getMessage().startswith("Graph query total_nodes")]
        assert query.request_id == "req-7"

    def test_completion_log_counts_statements(self, client, fake_driver, caplog):
        fake_driver.queue([], [{"graphName": "componentsGraph", "nodeCount": 5, "relationshipCount": 4}])

        with caplog.at_level(logging.INFO):
            client.get("/project-components-graph", headers={"X-Request-ID": "req-9"})

        [completed] = [r for r in caplog.records if r.getMessage() == "Request completed"]
        assert completed.request_id == "req-9"
        assert completed.statements == 2
        assert completed.status_code == 200


class TestLifespan:
    """Test that the application owns the graph client lifecycle."""

    def test_client_closed_on_shutdown(self, graph_client, fake_driver):
        app = create_app(graph_client=graph_client)

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            assert not graph_client.closed

        assert graph_client.closed
        assert fake_driver.closed
