from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ledwarden.core.errors import ErrorKind, LedWardenError


class ControllerErrorData(BaseModel):
    """Structured data for controller HTTP errors.

    Args:
        message: Human-readable error description
        method: HTTP method (GET, POST, etc.)
        endpoint: Endpoint path relative to the API root (e.g. "/playlists")
        url: Full request URL
        duration_ms: Time spent on the request before it failed
        status: HTTP status code (if a response arrived)
        status_text: HTTP reason phrase (if a response arrived)
        response_body: Truncated response body for debugging
        cause: Original exception that caused this error
    """

    model_config = {"arbitrary_types_allowed": True}

    message: str
    method: str
    endpoint: str
    url: str
    duration_ms: int | None = None
    status: int | None = None
    status_text: str | None = None
    response_body: str | None = None
    cause: BaseException | None = Field(default=None, repr=False)


class ControllerError(LedWardenError):
    """Base exception for all controller transport and response errors.

    Wraps structured error data in an exception for ergonomic error handling.

    Attributes:
        data: Structured error data (ControllerErrorData)
        message: Human-readable error description
        method: HTTP method
        endpoint: Endpoint path
        url: Request URL
        duration_ms: Request duration
        status: HTTP status code (if available)
        status_text: HTTP reason phrase (if available)
        response_body: Truncated response body
        cause: Original exception that caused this error
    """

    def __init__(
        self,
        *,
        message: str,
        method: str,
        endpoint: str,
        url: str,
        duration_ms: int | None = None,
        status: int | None = None,
        status_text: str | None = None,
        response_body: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.data = ControllerErrorData(
            message=message,
            method=method,
            endpoint=endpoint,
            url=url,
            duration_ms=duration_ms,
            status=status,
            status_text=status_text,
            response_body=response_body,
            cause=cause,
        )
        # Expose fields as attributes for convenience
        self.message = self.data.message
        self.method = self.data.method
        self.endpoint = self.data.endpoint
        self.url = self.data.url
        self.duration_ms = self.data.duration_ms
        self.status = self.data.status
        self.status_text = self.data.status_text
        self.response_body = self.data.response_body
        self.cause = self.data.cause

        super().__init__(str(self))

    def __str__(self) -> str:
        """Format error for logging and display."""
        parts = [self.message, f"{self.method} {self.url}"]
        if self.status is not None:
            parts.append(f"status={self.status} {self.status_text or ''}".rstrip())
        if self.response_body:
            parts.append(f"body={self.response_body}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out.update(
            message=self.message,
            method=self.method,
            endpoint=self.endpoint,
            url=self.url,
            duration_ms=self.duration_ms,
        )
        return out


class ControllerRejectedError(ControllerError):
    """The controller answered with a non-success status."""

    kind = ErrorKind.CONTROLLER_REJECTION
    code = "LEDFX_API_ERROR"

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out.update(
            status=self.status,
            status_text=self.status_text,
            response_body=self.response_body,
        )
        return out


class ControllerConnectionError(ControllerError):
    """No response arrived (DNS, refused connection, reset, etc.)."""

    kind = ErrorKind.TRANSPORT
    code = "LEDFX_CONNECTION_ERROR"

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["cause"] = str(self.cause) if self.cause is not None else None
        return out


class ControllerTimeoutError(ControllerConnectionError):
    """Request timed out before any response arrived."""


class ControllerDecodeError(ControllerError):
    """Response body could not be decoded or did not match the expected shape."""

    kind = ErrorKind.DECODE
    code = "LEDFX_DECODE_ERROR"
