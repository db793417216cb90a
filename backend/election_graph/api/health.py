"""Health and readiness endpoints."""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from election_graph.graph.api import get_graph_client
from election_graph.graph.health import get_graph_health
from election_graph.graph.neo4j_client import GraphClient

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = "ok"


class DatabaseCheck(BaseModel):
    """Graph database reachability."""

    reachable: bool
    latency_ms: int | None = None
    database: str | None = None
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: Literal["ok", "down"]
    database: DatabaseCheck


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Simple health check endpoint. Returns 200 if the API is running.",
)
async def health_check() -> HealthResponse:
    """Health check endpoint - just checks if the process is alive."""
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Verifies the graph database answers a trivial query. Returns 503 when it does not.",
)
async def readiness_check(
    response: Response,
    client: Annotated[GraphClient, Depends(get_graph_client)],
) -> ReadinessResponse:
    health = await get_graph_health(client)
    if not health["reachable"]:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="down", database=DatabaseCheck(**health))
    return ReadinessResponse(status="ok", database=DatabaseCheck(**health))
