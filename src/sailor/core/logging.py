"""
Logging utilities for the Sailor client.

Provides human readable and JSON-structured formatters that carry the
resource context (kind, name, strategy) of background refresh work.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


CONTEXT_FIELDS = ("resource_kind", "resource_name", "strategy", "origin", "version")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs JSON-structured log lines.

    Each log line includes:
    - Standard log fields (timestamp, level, message, logger)
    - Resource context fields if present
    """

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_timestamp:
            log_entry["timestamp"] = datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat()

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Formatter that outputs human-readable log lines with resource context.

    Format: TIMESTAMP - LOGGER - LEVEL - MESSAGE [resource_kind=X resource_name=Y]
    """

    def __init__(self, include_timestamp: bool = True):
        if include_timestamp:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            fmt = "%(name)s - %(levelname)s - %(message)s"
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)

        context_parts = []
        for field in ("resource_kind", "resource_name", "strategy"):
            value = getattr(record, field, None)
            if value:
                context_parts.append(f"{field}={value}")

        if context_parts:
            return f"{base} [{' '.join(context_parts)}]"
        return base


def resource_context(kind: Any, name: str = "", strategy: Any = None) -> Dict[str, Any]:
    """
    Build the `extra` mapping for a log call about one resource.

    Example:
        >>> logger.warning("poll failed", extra=resource_context(kind, name))
    """
    context = {
        "resource_kind": getattr(kind, "value", kind),
        "resource_name": name or None,
    }
    if strategy is not None:
        context["strategy"] = getattr(strategy, "value", strategy)
    return context


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger instance for the Sailor client.

    Args:
        name: Logger name (typically __name__ of the calling module)
        level: Optional logging level override
    """
    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    return logger


def configure_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    include_timestamp: bool = True,
    structured: bool = False,
) -> logging.Logger:
    """
    Configure logging for the sailor package.

    Attaches a single stdout handler to the `sailor` logger. Calling it
    again only updates the level.

    Args:
        level: Logging level (default: INFO)
        format_string: Custom format string (ignored if structured=True)
        include_timestamp: Whether to include timestamp in log messages
        structured: If True, output JSON-structured logs

    Returns:
        The configured package logger
    """
    sailor_logger = logging.getLogger("sailor")
    sailor_logger.setLevel(level)

    if not sailor_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)

        if structured:
            formatter = StructuredFormatter(include_timestamp=include_timestamp)
        elif format_string:
            formatter = logging.Formatter(format_string)
        else:
            formatter = HumanReadableFormatter(include_timestamp=include_timestamp)

        handler.setFormatter(formatter)
        sailor_logger.addHandler(handler)
    else:
        for handler in sailor_logger.handlers:
            handler.setLevel(level)

    return sailor_logger
