"""Election graph query service.

Each function runs one fixed statement batch and projects the resulting
records onto the endpoint's response fields.
"""

import logging
from typing import Any

from election_graph.graph import queries
from election_graph.graph.executor import QueryExecutor
from election_graph.graph.normalize import normalize_all, normalize_first

logger = logging.getLogger(__name__)

# Response field maps: {output_field: result_column}
ELECTION_VOTES_FIELDS = {"year": "year", "party": "party", "candidate_votes": "candidate_votes"}
PREDICTION_FIELDS = {"candidate1": "candidate1", "candidate2": "candidate2", "probability": "probability"}
CENTRALITY_FIELDS = {"name": "name", "score": "score"}
PROJECTION_FIELDS = {
    "graphName": "graphName",
    "nodeCount": "nodeCount",
    "relationshipCount": "relationshipCount",
}
WCC_FIELDS = {"Candidate": "Candidate", "ComponentId": "ComponentId"}
NODE_COUNT_FIELDS = {"NodeType": "NodeType", "TotalCount": "TotalCount"}
TOTAL_NODES_FIELDS = {"totalNodes": "totalNodes"}
TOTAL_RELATIONSHIPS_FIELDS = {"totalRelationships": "totalRelationships"}
ISOLATED_NODES_FIELDS = {"isolatedNodes": "isolatedNodes"}


async def get_election_votes(executor: QueryExecutor, election_type: str) -> list[dict[str, Any]]:
    """Votes per year and party for one election type."""
    records = await executor.execute_one(queries.election_votes(election_type))
    return normalize_all(records, ELECTION_VOTES_FIELDS)


async def get_candidate_predictions(executor: QueryExecutor) -> list[dict[str, Any]]:
    """Top predicted candidate links from the trained link-prediction model."""
    records = await executor.execute_one(queries.candidate_predictions())
    return normalize_all(records, PREDICTION_FIELDS)


async def get_degree_centrality(executor: QueryExecutor) -> list[dict[str, Any]]:
    """Degree centrality of candidates and elections (recreates the projection)."""
    *_, scores = await executor.execute(queries.degree_centrality())
    return normalize_all(scores, CENTRALITY_FIELDS)


async def get_betweenness_centrality(executor: QueryExecutor) -> list[dict[str, Any]]:
    """Betweenness centrality of candidates (recreates the projection)."""
    *_, scores = await executor.execute(queries.betweenness_centrality())
    return normalize_all(scores, CENTRALITY_FIELDS)


async def create_components_projection(executor: QueryExecutor) -> dict[str, Any]:
    """(Re)create the undirected projection read by :func:`get_wcc_components`."""
    *_, projected = await executor.execute(queries.project_components_graph())
    summary = normalize_first(projected, PROJECTION_FIELDS)
    graph_name = summary["graphName"] or queries.COMPONENTS_GRAPH
    logger.info(
        f"Graph projection created: graph={graph_name}, nodes={summary['nodeCount']}, "
        f"relationships={summary['relationshipCount']}"
    )
    return {
        "message": (
            f"Graph projection '{graph_name}' created with {summary['nodeCount']} nodes "
            f"and {summary['relationshipCount']} relationships"
        )
    }


async def get_wcc_components(executor: QueryExecutor) -> list[dict[str, Any]]:
    """First components from the WCC stream over the components projection."""
    records = await executor.execute_one(queries.wcc_components())
    return normalize_all(records, WCC_FIELDS)


async def drop_projection(executor: QueryExecutor, projection: str) -> None:
    """Drop a named projection; fails if it does not exist."""
    await executor.execute_one(queries.drop_projection(projection))
    logger.info(f"Graph projection dropped: graph={projection}")


async def get_node_counts(executor: QueryExecutor) -> list[dict[str, Any]]:
    records = await executor.execute_one(queries.node_count_by_label())
    return normalize_all(records, NODE_COUNT_FIELDS)


async def get_total_nodes(executor: QueryExecutor) -> dict[str, Any]:
    records = await executor.execute_one(queries.total_nodes())
    return normalize_first(records, TOTAL_NODES_FIELDS)


async def get_total_relationships(executor: QueryExecutor) -> dict[str, Any]:
    records = await executor.execute_one(queries.total_relationships())
    return normalize_first(records, TOTAL_RELATIONSHIPS_FIELDS)


async def get_isolated_nodes(executor: QueryExecutor) -> dict[str, Any]:
    records = await executor.execute_one(queries.isolated_nodes())
    return normalize_first(records, ISOLATED_NODES_FIELDS)
