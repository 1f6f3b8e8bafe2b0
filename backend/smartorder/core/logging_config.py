"""
Structured JSON logging configuration.

This module sets up application-wide JSON logging with:
- Consistent field names across all logs
- Store and operation tracking for data-access calls
- Timestamp, level, message, logger name

Logs are output to stdout in JSON format for easy parsing by
log aggregation systems.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from smartorder.core.config import settings


# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
})

# Never written to log output, whatever a caller passes in `extra`.
_REDACTED_FIELDS = frozenset({"password"})


class JSONFormatter(logging.Formatter):
    """
    Custom JSON formatter for structured logging.

    Outputs log records as single-line JSON objects with consistent fields:
    - timestamp: ISO 8601 format with microseconds (UTC)
    - level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - message: Log message
    - logger: Logger name (module path)
    - store: Store class that emitted the record (if available)
    - operation: Store operation name (if available)
    - entity_id: Primary key involved (if available)
    - exception: Exception details (if exception occurred)
    - extra: Any additional fields from log record

    Example output:
        {"timestamp": "2026-01-15T10:30:00.123456+00:00", "level": "DEBUG",
         "message": "Saved entity", "logger": "smartorder.repositories.base",
         "store": "ProductStore", "operation": "save", "entity_id": 7}
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON string.

        Args:
            record: LogRecord to format

        Returns:
            JSON string representation of log record
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)

        # Fields passed via logger.info("msg", extra={...})
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_data or key in _REDACTED_FIELDS:
                continue
            if value is not None:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None
) -> None:
    """
    Configure application logging.

    Sets up:
    - Root logger with specified level
    - JSON formatter (if json_format=True)
    - StreamHandler to stdout
    - Removes default handlers

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL),
            defaults to settings.log_level
        json_format: Use JSON formatter (True) or simple formatter (False),
            defaults to settings.log_json

    Note:
        Call this once at application startup, before any logging occurs.
    """
    if level is None:
        level = settings.log_level
    if json_format is None:
        json_format = settings.log_json

    root_logger = logging.getLogger()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_format:
        formatter = JSONFormatter()
    else:
        # Simple format for development/debugging
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance with given name.

    Args:
        name: Logger name (usually __name__ of the module)

    Returns:
        Logger instance

    Example:
        logger = get_logger(__name__)
        logger.info("Schema created", extra={"tables": 3})
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    store: Optional[str] = None,
    operation: Optional[str] = None,
    entity_id: Optional[int] = None,
    exc_info: bool = False,
    **extra_fields: Any
) -> None:
    """
    Log message with structured store context fields.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        store: Store class name
        operation: Store operation name
        entity_id: Primary key involved in the operation
        exc_info: Attach the exception currently being handled
        **extra_fields: Additional fields to include

    Example:
        log_with_context(
            logger,
            "debug",
            "Saved entity",
            store="UserStore",
            operation="save",
            entity_id=3
        )
    """
    extra: Dict[str, Any] = {}

    if store is not None:
        extra["store"] = store
    if operation is not None:
        extra["operation"] = operation
    if entity_id is not None:
        extra["entity_id"] = entity_id

    extra.update(
        (key, value) for key, value in extra_fields.items()
        if key not in _REDACTED_FIELDS
    )

    log_method = getattr(logger, level.lower())
    log_method(message, extra=extra, exc_info=exc_info)
