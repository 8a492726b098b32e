"""HTTPX wrapper used to talk to the LedFx controller.

Exposes a small surface:
- AsyncApiClient: async client with transport retries and structured errors
- HttpClientConfig / RetryPolicy: configuration
- Exceptions: ControllerError and subclasses
"""

from ledwarden.core.api.http.client import AsyncApiClient
from ledwarden.core.api.http.config import HttpClientConfig
from ledwarden.core.api.http.errors import (
    ControllerConnectionError,
    ControllerDecodeError,
    ControllerError,
    ControllerRejectedError,
    ControllerTimeoutError,
)
from ledwarden.core.api.http.retry import RetryPolicy

__all__ = [
    "AsyncApiClient",
    "HttpClientConfig",
    "RetryPolicy",
    "ControllerError",
    "ControllerRejectedError",
    "ControllerConnectionError",
    "ControllerTimeoutError",
    "ControllerDecodeError",
]
