from __future__ import annotations

import logging
import time
from collections.abc import Mapping

from pydantic import BaseModel

logger = logging.getLogger("ledwarden.core.api.http")


def redact_headers(headers: Mapping[str, str], redact: tuple[str, ...]) -> dict[str, str]:
    """Redact sensitive headers for logging.

    Args:
        headers: Headers to redact
        redact: Header names to redact (case-insensitive)

    Returns:
        Headers with sensitive values replaced with "***REDACTED***"
    """
    red = {v.lower() for v in redact}
    return {k: ("***REDACTED***" if k.lower() in red else v) for k, v in headers.items()}


class RequestLogContext(BaseModel):
    """Context for structured controller request logging.

    Args:
        method: HTTP method (GET, POST, etc.)
        endpoint: Endpoint path relative to the API root
        attempt: Attempt number (1-indexed)
    """

    method: str
    endpoint: str
    attempt: int


def log_request(
    ctx: RequestLogContext, headers: Mapping[str, str], redact: tuple[str, ...]
) -> float:
    """Log an outgoing request and return the start timestamp."""
    start = time.perf_counter()
    logger.debug(
        "LedFx request",
        extra={
            "method": ctx.method,
            "endpoint": ctx.endpoint,
            "attempt": ctx.attempt,
            "headers": redact_headers(headers, redact),
        },
    )
    return start


def log_response(ctx: RequestLogContext, status_code: int, elapsed_s: float) -> None:
    """Log a received response with timing information."""
    level = logging.DEBUG if status_code < 400 else logging.WARNING
    logger.log(
        level,
        "LedFx response",
        extra={
            "method": ctx.method,
            "endpoint": ctx.endpoint,
            "attempt": ctx.attempt,
            "status_code": status_code,
            "elapsed_ms": int(elapsed_s * 1000),
        },
    )
