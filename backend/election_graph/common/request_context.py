"""Request-scoped context for query logging.

We use contextvars so:
- executor and route log lines carry the request_id of the request that ran them
- the request completion log reports how many statements the request ran and
  how long it spent waiting on Neo4j
"""

from __future__ import annotations

import contextvars
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class QueryStats:
    """Statements run for one request and the time spent in them."""

    statements: int = 0
    db_ms: float = 0.0


request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
# Shared by reference: statements run in child tasks (call_next, wait_for) update the same object
query_stats_var: contextvars.ContextVar[QueryStats | None] = contextvars.ContextVar("query_stats", default=None)


def get_request_id() -> str | None:
    """Get current request id (if in a request context)."""
    return request_id_var.get()


def record_statement(duration_ms: float) -> None:
    """Count one executed statement against the current request, if any."""
    stats = query_stats_var.get()
    if stats is None:
        return
    stats.statements += 1
    stats.db_ms += duration_ms


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign the request id and report each request's Neo4j usage."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        stats = QueryStats()
        token_request_id = request_id_var.set(request_id)
        token_stats = query_stats_var.set(stats)

        start_time = time.perf_counter()
        logger.info(
            "Request started",
            extra={"request_id": request_id, "method": request.method, "path": request.url.path},
        )

        try:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "Request failed",
                    extra={
                        "request_id": request_id,
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": 500,
                        "latency_ms": int((time.perf_counter() - start_time) * 1000),
                        "error": str(e),
                    },
                    exc_info=True,
                )
                raise

            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "Request completed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "latency_ms": int((time.perf_counter() - start_time) * 1000),
                    "statements": stats.statements,
                    "db_ms": round(stats.db_ms, 1),
                },
            )
            return response
        finally:
            query_stats_var.reset(token_stats)
            request_id_var.reset(token_request_id)
