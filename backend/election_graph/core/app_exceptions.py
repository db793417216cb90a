"""Gateway exceptions. Every one of them renders as ``{"error": message}``."""

from fastapi import status


class GatewayError(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class RequestValidationFailed(GatewayError):
    """A required request field is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class ExecutionError(GatewayError):
    """A statement in a batch failed, or its session could not be released."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class QueryTimeoutError(GatewayError):
    """A statement batch did not finish within the per-request budget."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
