"""Structured JSON logging configuration."""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from election_graph.common.request_context import get_request_id
from election_graph.core.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps every line with the same base fields.

    Lines logged while a request is being served also carry its request_id,
    taken from the record's ``extra`` or else from the request context.
    """

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["event"] = record.getMessage()

        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            log_record["request_id"] = request_id

        log_record.pop("message", None)
        log_record.pop("asctime", None)


def setup_logging(level: str | None = None) -> None:
    """Configure root logging to emit one JSON object per line on stdout."""
    root_logger = logging.getLogger()
    level_name = (level or settings.LOG_LEVEL).upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    root_logger.handlers.clear()

    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(logger)s %(event)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Request logging is done by RequestContextMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    # Driver notifications (deprecations, GDS warnings) are noisy at INFO
    logging.getLogger("neo4j").setLevel(logging.WARNING)
