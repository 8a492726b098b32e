"""Tests for AsyncApiClient.

Uses httpx.MockTransport so no controller needs to be running.
"""

from __future__ import annotations

import json

import httpx
import pytest

from ledwarden.core.api.http.client import AsyncApiClient
from ledwarden.core.api.http.config import HttpClientConfig
from ledwarden.core.api.http.errors import (
    ControllerConnectionError,
    ControllerDecodeError,
    ControllerRejectedError,
    ControllerTimeoutError,
)
from ledwarden.core.api.http.retry import RetryPolicy

BASE_URL = "http://ledfx.test:8888/api"


def _client(handler, **policy) -> AsyncApiClient:
    cfg = HttpClientConfig(base_url=BASE_URL)
    retry = RetryPolicy(base_delay_s=0.0, jitter=0.0, **policy)
    return AsyncApiClient(cfg, transport=httpx.MockTransport(handler), retry_policy=retry)


@pytest.mark.asyncio
async def test_async_success_json() -> None:
    """Test successful GET with a JSON response."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/virtuals"
        return httpx.Response(200, json={"virtuals": {}})

    async with _client(handler) as c:
        assert await c.get("/virtuals") == {"virtuals": {}}


@pytest.mark.asyncio
async def test_json_body_sent() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = request.read()
        return httpx.Response(200, json={"status": "success"})

    async with _client(handler) as c:
        await c.post("/colors", json_body={"fire": "#FF0000"})

    assert seen["method"] == "POST"
    assert json.loads(seen["body"]) == {"fire": "#FF0000"}


@pytest.mark.asyncio
async def test_rejection_is_not_retried() -> None:
    """A controller that answered is never asked again."""
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(404, text="no such scene")

    async with _client(handler, max_attempts=3) as c:
        with pytest.raises(ControllerRejectedError) as exc_info:
            await c.get("/scenes/nope")

    assert calls["n"] == 1
    error = exc_info.value
    assert error.status == 404
    assert error.endpoint == "/scenes/nope"
    assert error.response_body == "no such scene"
    assert error.code == "LEDFX_API_ERROR"


@pytest.mark.asyncio
async def test_server_error_is_a_rejection() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    async with _client(handler, max_attempts=3) as c:
        with pytest.raises(ControllerRejectedError) as exc_info:
            await c.get("/info")
    assert exc_info.value.status == 500


@pytest.mark.asyncio
async def test_connect_error_retried_on_get() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"ok": True})

    async with _client(handler, max_attempts=2) as c:
        assert await c.get("/info") == {"ok": True}
    assert calls["n"] == 2


@pytest.mark.asyncio
async def test_connect_error_exhausted() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler, max_attempts=2) as c:
        with pytest.raises(ControllerConnectionError) as exc_info:
            await c.get("/virtuals")

    assert calls["n"] == 2
    error = exc_info.value
    assert error.method == "GET"
    assert error.endpoint == "/virtuals"
    assert isinstance(error.cause, httpx.ConnectError)
    assert error.to_dict()["cause"] == "connection refused"


@pytest.mark.asyncio
async def test_connect_error_not_retried_on_post() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler, max_attempts=3) as c:
        with pytest.raises(ControllerConnectionError):
            await c.post("/scenes", json_body={"name": "x"})
    assert calls["n"] == 1


@pytest.mark.asyncio
async def test_timeout_maps_to_timeout_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with _client(handler, max_attempts=1) as c:
        with pytest.raises(ControllerTimeoutError) as exc_info:
            await c.get("/virtuals")
    assert exc_info.value.kind.value == "transport"


@pytest.mark.asyncio
async def test_empty_body_is_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204)

    async with _client(handler) as c:
        assert await c.delete("/colors/fire") is None


@pytest.mark.asyncio
async def test_bad_json_is_decode_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    async with _client(handler) as c:
        with pytest.raises(ControllerDecodeError) as exc_info:
            await c.get("/info")
    assert exc_info.value.code == "LEDFX_DECODE_ERROR"
    assert "not json" in (exc_info.value.response_body or "")


def test_retry_policy_methods() -> None:
    policy = RetryPolicy()
    assert policy.allows_method("get")
    assert not policy.allows_method("POST")
    assert not policy.allows_method("DELETE")


def test_retry_delay_is_capped() -> None:
    policy = RetryPolicy(base_delay_s=1.0, max_delay_s=2.0, jitter=0.0)
    assert policy.compute_delay(1) == 1.0
    assert policy.compute_delay(5) == 2.0


def test_config_rejects_bad_base_url() -> None:
    with pytest.raises(ValueError):
        HttpClientConfig(base_url="ledfx.local:8888")
