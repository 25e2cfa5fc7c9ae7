"""
Structured JSON logging configuration.

Provides structured logging with channels (http, db, auth, scoring, admin),
request ID tracking, and context-rich log entries. All log output is
valid JSON written to stdout for container log aggregation.
"""

import logging
import json
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from expertcheck.config import LOG_LEVEL

# Request ID of the HTTP request currently being handled.
# Attached to every log entry produced while serving that request.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ["http", "db", "auth", "scoring", "admin"]


class StructuredJsonFormatter(logging.Formatter):
    """
    Formatter that renders each record as a single JSON object.

    Each log line contains:
    - timestamp: ISO 8601 timestamp in UTC
    - level: Log severity (INFO, WARNING, ERROR, DEBUG)
    - message: Human-readable log message
    - channel: Log source category (http, db, auth, scoring, admin)
    - context: Business context (request_id, user_id, test_result_id, ...)
    - extra: Additional metadata (ip, duration_ms, ...)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1] if "." in record.name else "app"),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging():
    """
    Configure the root logger and all channel-specific loggers.

    Output goes to stdout through a single handler using the JSON formatter.
    """
    formatter = StructuredJsonFormatter()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root_logger.handlers = [handler]

    # Channel loggers inherit the root handler but keep distinct names
    # so log entries can be filtered by channel
    for channel in CHANNELS:
        logger = logging.getLogger(f"expertcheck.{channel}")
        logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """
    Get a channel-specific logger.

    Args:
        channel: Log channel name (http, db, auth, scoring, admin)

    Returns:
        Logger instance for the specified channel
    """
    return logging.getLogger(f"expertcheck.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info: bool = False):
    """
    Emit a structured log entry with business context and extra metadata.

    Args:
        logger: The channel logger to use
        level: Log level string (INFO, WARNING, ERROR, DEBUG)
        message: Human-readable log message
        context: Business context dict (user_id, test_result_id, question_id)
        extra_data: Additional metadata dict (ip, duration_ms, counts)
        exc_info: Attach the exception currently being handled
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        exc_info=exc_info,
        extra={"context": context or {}, "extra_data": extra_data or {}, "channel": logger.name.split(".")[-1]}
    )


def generate_request_id() -> str:
    """Generate a new UUID for request tracking."""
    return str(uuid.uuid4())
