"""Logging configuration utilities for ledwarden.

Provides:
- Text or structured JSON output, to stdout or a file
- Context-aware loggers via LoggerAdapter
- Operation logging (start, outcome and duration of each validated operation)
"""

from __future__ import annotations

import json
import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

OPERATIONS_LOGGER = "ledwarden.operations"

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
    }
)


class StructuredJSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per log record.

    Format:
    {
        "level": "INFO",
        "message": "...",
        "timestamp": "2026-01-29T12:00:00.000000+00:00",
        "context": {
            "logger_name": "...",
            "module": "...",
            "function": "...",
            "line": 42,
            ...extra fields...
        }
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON.

        Args:
            record: LogRecord to format

        Returns:
            JSON-formatted log string
        """
        context: dict[str, Any] = {
            "logger_name": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
        }

        if record.exc_info:
            context["error_type"] = record.exc_info[0].__name__ if record.exc_info[0] else None
            context["error_message"] = str(record.exc_info[1]) if record.exc_info[1] else None
            context["stack_trace"] = record.exc_text or self.formatException(record.exc_info)

        # Extra fields from LoggerAdapter or extra kwargs
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                context[key] = value

        log_entry = {
            "level": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "context": context,
        }
        return json.dumps(log_entry, default=str)


def _suppress_noisy_loggers() -> None:
    logging.getLogger("httpx").setLevel(logging.ERROR)
    logging.getLogger("httpcore").setLevel(logging.ERROR)
    logging.getLogger("asyncio").setLevel(logging.ERROR)


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    filename: str | None = None,
    structured: bool = False,
) -> None:
    """Configure application-wide logging.

    Can be called multiple times to reconfigure logging (uses force=True).

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Case-insensitive.
        format_string: Format for text output; ignored if structured=True.
        filename: Path to log file. If None, logs to stdout.
        structured: If True, emit one JSON object per line.

    Examples:
        >>> configure_logging(level="INFO")
        >>> configure_logging(level="DEBUG", structured=True, filename="ledwarden.jsonl")
    """
    handler: logging.Handler
    if filename:
        handler = logging.FileHandler(filename)
    else:
        handler = logging.StreamHandler(sys.stdout)

    formatter: logging.Formatter
    if structured:
        formatter = StructuredJSONFormatter()
    else:
        if format_string is None:
            format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        formatter = logging.Formatter(format_string)

    handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )

    _suppress_noisy_loggers()


def get_logger(name: str, **kwargs: Any) -> logging.Logger | logging.LoggerAdapter:
    """Get a configured logger instance.

    If context kwargs are provided, returns a LoggerAdapter that automatically
    includes the context in all log messages.

    Args:
        name: Logger name (usually __name__ from the calling module)
        **kwargs: Additional context to include in logs (e.g., virtual_id)

    Returns:
        Logger instance, or LoggerAdapter if context provided
    """
    base = logging.getLogger(name)
    if kwargs:
        return logging.LoggerAdapter(base, kwargs)
    return base


@contextmanager
def log_operation(operation: str, **fields: Any) -> Iterator[None]:
    """Log the start, outcome and duration of one operation.

    Failures are logged and re-raised unchanged.

    Args:
        operation: Operation name (e.g. "set_blender")
        **fields: Arguments worth recording; nested under ``fields``

    Example:
        >>> with log_operation("update_scene", scene_id="intro"):
        ...     await mutator.update_scene("intro", name="Intro")
    """
    op_logger = get_logger(OPERATIONS_LOGGER, operation=operation, fields=fields)
    op_logger.info(f"{operation} started")
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        op_logger.warning(f"{operation} failed after {elapsed_ms}ms: {type(e).__name__}: {e}")
        raise
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    op_logger.info(f"{operation} succeeded in {elapsed_ms}ms")
