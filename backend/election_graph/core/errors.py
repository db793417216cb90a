"""Exception handlers producing the gateway's single error shape."""

import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from election_graph.core.app_exceptions import GatewayError
from election_graph.core.config import settings

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while executing the query"


class ErrorResponse(BaseModel):
    """Error envelope: ``{"error": message}``."""

    error: str


def get_request_id(request: Request) -> str | None:
    """Get request ID from request state, if the middleware set one."""
    return getattr(request.state, "request_id", None)


def _error_response(status_code: int, message: str, request: Request) -> JSONResponse:
    headers = None
    request_id = get_request_id(request)
    if request_id:
        headers = {"X-Request-ID": request_id}
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


def _public_message(message: str) -> str:
    return message if settings.EXPOSE_ERROR_DETAILS else GENERIC_ERROR_MESSAGE


def format_validation_errors(errors: list[dict[str, Any]]) -> str:
    """Flatten pydantic error entries into one readable line."""
    parts = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", []) if part != "body"]
        field = ".".join(loc) or "body"
        parts.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "Invalid request data"


async def gateway_exception_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Handle GatewayError subclasses using the status they carry."""
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
            exc_info=exc,
        )
        return _error_response(exc.status_code, _public_message(exc.message), request)

    logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return _error_response(exc.status_code, exc.message, request)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors as 400 Bad Request."""
    message = format_validation_errors(list(exc.errors()))
    logger.info(f"Invalid request body on {request.method} {request.url.path}: {message}")
    return _error_response(status.HTTP_400_BAD_REQUEST, message, request)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions (404, 405, ...) in the same envelope."""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(exc.status_code, message, request)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions (500)."""
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        _public_message(str(exc) or type(exc).__name__),
        request,
    )
