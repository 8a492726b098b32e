"""Async HTTP client for the LedFx controller API, built on HTTPX.

Provides:
- Transport-failure retries with exponential backoff (idempotent methods only)
- Structured errors that keep "controller said no" apart from "unreachable"
- Request/response logging with redaction
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from typing import Any

import httpx

from ledwarden.core.api.http.config import HttpClientConfig
from ledwarden.core.api.http.errors import (
    ControllerConnectionError,
    ControllerDecodeError,
    ControllerError,
    ControllerRejectedError,
    ControllerTimeoutError,
)
from ledwarden.core.api.http.logging_utils import RequestLogContext, log_request, log_response
from ledwarden.core.api.http.retry import RetryPolicy
from ledwarden.core.api.http.utils import join_url, safe_snippet


def _merge_headers(base: Mapping[str, str], extra: Mapping[str, str] | None) -> dict[str, str]:
    """Merge base headers with request-specific headers."""
    out = dict(base)
    if extra:
        out.update(extra)
    return out


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _build_error(
    *,
    exc_type: type[ControllerError],
    message: str,
    method: str,
    endpoint: str,
    url: str,
    start: float,
    response: httpx.Response | None = None,
    body_snippet_limit: int = 4096,
    cause: BaseException | None = None,
) -> ControllerError:
    """Build a controller error with response context.

    Args:
        exc_type: Error class to instantiate
        message: Human-readable error message
        method: HTTP method
        endpoint: Endpoint path relative to the API root
        url: Full request URL
        start: perf_counter timestamp taken when the request started
        response: HTTP response (if one arrived)
        body_snippet_limit: Max bytes of body to include
        cause: Original exception that triggered this error

    Returns:
        Constructed controller error
    """
    status = status_text = body = None
    if response is not None:
        status = response.status_code
        status_text = response.reason_phrase
        body = safe_snippet(response.content or b"", body_snippet_limit)

    return exc_type(
        message=message,
        method=method,
        endpoint=endpoint,
        url=url,
        duration_ms=_elapsed_ms(start),
        status=status,
        status_text=status_text,
        response_body=body,
        cause=cause,
    )


class AsyncApiClient:
    """Asynchronous HTTP client for the controller API.

    Built on httpx.AsyncClient with transport retries, structured errors, and
    observability.

    Args:
        config: Client configuration
        retry_policy: Retry policy (defaults to retrying transport failures on GET)
        transport: Optional custom transport (useful for testing)

    Example:
        >>> config = HttpClientConfig(base_url="http://localhost:8888/api")
        >>> async with AsyncApiClient(config) as http:
        ...     data = await http.request_json("GET", "/virtuals")
    """

    def __init__(
        self,
        config: HttpClientConfig,
        *,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy()
        self._client = httpx.AsyncClient(
            headers={"User-Agent": config.user_agent, **config.headers},
            timeout=config.timeout,
            limits=config.limits,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client and release resources."""
        await self._client.aclose()

    async def __aenter__(self) -> AsyncApiClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        Raises:
            ControllerRejectedError: The controller answered with status >= 400
            ControllerTimeoutError: No response before the timeout
            ControllerConnectionError: No response could be obtained
        """
        method_u = method.upper()
        url = join_url(self.config.base_url, endpoint)
        merged_headers = _merge_headers(self._client.headers, headers)

        attempts = 0

        while True:
            attempts += 1
            ctx = RequestLogContext(method=method_u, endpoint=endpoint, attempt=attempts)
            start = log_request(ctx, merged_headers, self.config.redact_headers)

            try:
                resp = await self._client.request(
                    method_u,
                    url,
                    params=params,
                    headers=merged_headers,
                    json=json_body,
                )
            except httpx.TimeoutException as e:
                if self._should_retry(method_u, attempts):
                    await asyncio.sleep(self.retry_policy.compute_delay(attempts))
                    continue
                raise _build_error(
                    exc_type=ControllerTimeoutError,
                    message=f"Timed out talking to LedFx at {url}",
                    method=method_u,
                    endpoint=endpoint,
                    url=url,
                    start=start,
                    cause=e,
                ) from e
            except httpx.RequestError as e:
                if self._should_retry(method_u, attempts):
                    await asyncio.sleep(self.retry_policy.compute_delay(attempts))
                    continue
                raise _build_error(
                    exc_type=ControllerConnectionError,
                    message=f"Failed to connect to LedFx at {url}: {e}",
                    method=method_u,
                    endpoint=endpoint,
                    url=url,
                    start=start,
                    cause=e,
                ) from e

            log_response(ctx, resp.status_code, time.perf_counter() - start)

            if resp.status_code >= 400:
                raise _build_error(
                    exc_type=ControllerRejectedError,
                    message=f"LedFx API error: {resp.status_code} {resp.reason_phrase}",
                    method=method_u,
                    endpoint=endpoint,
                    url=url,
                    start=start,
                    response=resp,
                    body_snippet_limit=self.config.max_response_body_for_error,
                )

            return resp

    def _should_retry(self, method: str, attempts: int) -> bool:
        return self.retry_policy.allows_method(method) and attempts < self.retry_policy.max_attempts

    def json(self, response: httpx.Response) -> Any:
        """Decode a JSON response body.

        Returns:
            Decoded JSON data, or None for an empty body

        Raises:
            ControllerDecodeError: If the body is not valid JSON
        """
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ControllerDecodeError(
                message="Failed to parse JSON response from LedFx",
                method=response.request.method,
                endpoint=response.request.url.path,
                url=str(response.request.url),
                status=response.status_code,
                status_text=response.reason_phrase,
                response_body=safe_snippet(
                    response.content, self.config.max_response_body_for_error
                ),
                cause=e,
            ) from e

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        """Send a request and decode its JSON body."""
        resp = await self.request(method, endpoint, params=params, json_body=json_body)
        return self.json(resp)

    async def get(self, endpoint: str, **kwargs: Any) -> Any:
        """GET an endpoint and return its decoded JSON body."""
        return await self.request_json("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> Any:
        """POST to an endpoint and return its decoded JSON body."""
        return await self.request_json("POST", endpoint, **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> Any:
        """PUT to an endpoint and return its decoded JSON body."""
        return await self.request_json("PUT", endpoint, **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> Any:
        """DELETE an endpoint and return its decoded JSON body."""
        return await self.request_json("DELETE", endpoint, **kwargs)
