"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from election_graph.api.router import api_router
from election_graph.common.request_context import RequestContextMiddleware
from election_graph.core.app_exceptions import GatewayError
from election_graph.core.config import settings
from election_graph.core.errors import (
    gateway_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from election_graph.core.logging import setup_logging
from election_graph.graph.neo4j_client import GraphClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the graph client at startup and close its pool at shutdown."""
    setup_logging()
    client: GraphClient = app.state.graph_client
    client.connect()
    logger.info(f"{settings.PROJECT_NAME} started (neo4j={client.uri}, env={settings.ENV})")
    try:
        yield
    finally:
        # In-flight requests are not drained; their sessions fail once the pool closes
        await client.close()
        logger.info(f"{settings.PROJECT_NAME} stopped")


def create_app(graph_client: GraphClient | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        graph_client: Connection pool handle to serve requests with; built
            from settings when omitted. The application owns it and closes it
            on shutdown.
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="HTTP gateway for election graph analytics on Neo4j GDS",
        openapi_url="/openapi.json" if settings.ENV != "prod" else None,
        docs_url="/docs" if settings.ENV != "prod" else None,
        redoc_url="/redoc" if settings.ENV != "prod" else None,
        lifespan=lifespan,
    )
    app.state.graph_client = graph_client or GraphClient.from_settings(settings)

    # Add middleware (order matters - first added is innermost)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=not settings.cors_allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Add exception handlers
    app.add_exception_handler(GatewayError, gateway_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(api_router)

    return app


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        "election_graph.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


# Create app instance
app = create_app()
