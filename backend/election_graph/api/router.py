"""API router - includes all endpoints."""

from fastapi import APIRouter

from election_graph.api import health
from election_graph.graph import api as graph_api

api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["Health"])
api_router.include_router(graph_api.router, prefix="", tags=["Graph"])
