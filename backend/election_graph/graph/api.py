"""Election graph API endpoints."""

import logging
import time
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from election_graph.common.request_context import get_request_id
from election_graph.core.config import settings
from election_graph.graph import service
from election_graph.graph.executor import QueryExecutor
from election_graph.graph.neo4j_client import GraphClient

logger = logging.getLogger(__name__)

router = APIRouter()


class ElectionVotesRequest(BaseModel):
    """Body of POST /run-cypher."""

    type: str | None = Field(default=None, description="Election type, e.g. PRESIDENT or SENATE")


class DropProjectionRequest(BaseModel):
    """Body of POST /dropprojection."""

    projection: str = Field(..., description="Name of the GDS graph projection to drop")

    @field_validator("projection")
    @classmethod
    def projection_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("projection must not be blank")
        return value


def get_graph_client(request: Request) -> GraphClient:
    """Graph client owned by the application (see ``create_app``)."""
    return request.app.state.graph_client


def get_executor(client: Annotated[GraphClient, Depends(get_graph_client)]) -> QueryExecutor:
    """A fresh executor per request; each batch borrows its own session."""
    return QueryExecutor(client, timeout=settings.QUERY_TIMEOUT_SECONDS)


Executor = Annotated[QueryExecutor, Depends(get_executor)]


def resolve_election_type(body: ElectionVotesRequest | None) -> str:
    """Return the requested election type, or the default when absent or blank."""
    if body is None or body.type is None or not body.type.strip():
        return settings.DEFAULT_ELECTION_TYPE
    return body.type.strip()


def _log_query(name: str, start_time: float, result: Any) -> None:
    duration_ms = int((time.perf_counter() - start_time) * 1000)
    rows = len(result) if isinstance(result, list) else 1
    logger.info(
        f"Graph query {name}: rows={rows}, duration_ms={duration_ms}",
        extra={"request_id": get_request_id()},
    )


@router.post("/run-cypher")
async def run_election_votes(executor: Executor, body: ElectionVotesRequest | None = None):
    """Candidate votes summed per year and party for an election type."""
    election_type = resolve_election_type(body)
    start_time = time.perf_counter()
    result = await service.get_election_votes(executor, election_type)
    _log_query(f"election_votes[type={election_type}]", start_time, result)
    return result


@router.get("/candidate-predictions")
async def candidate_predictions(executor: Executor):
    """Top predicted candidate pairs from the link-prediction model."""
    start_time = time.perf_counter()
    result = await service.get_candidate_predictions(executor)
    _log_query("candidate_predictions", start_time, result)
    return result


@router.get("/candidates")
async def candidates_degree_centrality(executor: Executor):
    """Degree centrality ranking; recreates the candidate/election projection."""
    start_time = time.perf_counter()
    result = await service.get_degree_centrality(executor)
    _log_query("degree_centrality", start_time, result)
    return result


@router.get("/betweenness")
async def candidates_betweenness(executor: Executor):
    """Betweenness centrality ranking; recreates the co-participation projection."""
    start_time = time.perf_counter()
    result = await service.get_betweenness_centrality(executor)
    _log_query("betweenness_centrality", start_time, result)
    return result


@router.get("/project-components-graph")
async def project_components_graph(executor: Executor):
    """(Re)create the undirected projection used by /wcc-components."""
    start_time = time.perf_counter()
    result = await service.create_components_projection(executor)
    _log_query("project_components_graph", start_time, result)
    return result


@router.get("/wcc-components")
async def wcc_components(executor: Executor):
    """Weakly connected components of the components projection (first 10 rows)."""
    start_time = time.perf_counter()
    result = await service.get_wcc_components(executor)
    _log_query("wcc_components", start_time, result)
    return result


@router.post("/dropprojection", response_class=PlainTextResponse)
async def drop_projection(body: DropProjectionRequest, executor: Executor):
    """Drop a named graph projection."""
    start_time = time.perf_counter()
    await service.drop_projection(executor, body.projection)
    _log_query(f"drop_projection[{body.projection}]", start_time, None)
    return "Projection dropped"


@router.get("/node-count")
async def node_count(executor: Executor):
    start_time = time.perf_counter()
    result = await service.get_node_counts(executor)
    _log_query("node_count", start_time, result)
    return result


@router.get("/total-nodes")
async def total_nodes(executor: Executor):
    start_time = time.perf_counter()
    result = await service.get_total_nodes(executor)
    _log_query("total_nodes", start_time, result)
    return result


@router.get("/total-relationships")
async def total_relationships(executor: Executor):
    start_time = time.perf_counter()
    result = await service.get_total_relationships(executor)
    _log_query("total_relationships", start_time, result)
    return result


@router.get("/isolated-nodes")
async def isolated_nodes(executor: Executor):
    start_time = time.perf_counter()
    result = await service.get_isolated_nodes(executor)
    _log_query("isolated_nodes", start_time, result)
    return result
