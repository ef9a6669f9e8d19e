"""
Structured logging configuration.

Production emits one JSON object per line; developer mode emits text.
Structured fields ride on records as extra={"fields": {...}}.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

FIELDS_ATTR = "fields"

# Third-party loggers kept at WARNING regardless of the configured level
QUIET_LOGGERS = ("asyncio", "httpx", "uvicorn.access", "opentelemetry")


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs in JSON format with consistent schema.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "caller": f"{record.module}:{record.lineno}",
        }

        fields = getattr(record, FIELDS_ATTR, None)
        if isinstance(fields, dict):
            log_data.update(fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter that appends structured fields."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = getattr(record, FIELDS_ATTR, None)
        if isinstance(fields, dict) and fields:
            rendered = " ".join(f"{k}={v}" for k, v in fields.items())
            line = f"{line} | {rendered}"
        return line


def setup_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure application logging.

    Args:
        level: Level name, case-insensitive (debug, info, warning, ...)
        json_logs: JSON lines (production) or text (developer mode)
    """
    numeric_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if json_logs:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = TextFormatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get logger with given name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
