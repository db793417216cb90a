"""Neo4j graph health check utilities."""

import logging
from typing import Any

from election_graph.graph.neo4j_client import GraphClient

logger = logging.getLogger(__name__)


async def get_graph_health(client: GraphClient) -> dict[str, Any]:
    """
    Get Neo4j reachability information.

    Returns:
        Dictionary with:
        - reachable: bool
        - latency_ms: int | None
        - database: str | None
        - error: str (only when unreachable)

    Behavior:
        - Never raises; an unreachable database is reported, not thrown
    """
    is_reachable, latency_ms, ping_details = await client.ping()

    health: dict[str, Any] = {
        "reachable": is_reachable,
        "latency_ms": latency_ms,
        "database": client.database,
    }
    if not is_reachable:
        health["error"] = ping_details.get("error", "unreachable")
        logger.warning(f"Neo4j unreachable: {health['error']}")
    return health
