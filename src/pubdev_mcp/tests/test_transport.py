"""Tests for the httpx-backed transport."""

from __future__ import annotations

import httpx
import pytest

from pubdev_mcp.errors import ErrorCode, FetchFailure
from pubdev_mcp.resources import RegistryEndpoints
from pubdev_mcp.settings import HttpSettings
from pubdev_mcp.transport import HttpTransport, HttpxTransport, ResourceLocator, TransportResponse


def make_transport(handler) -> HttpxTransport:
    return HttpxTransport(
        default_headers={"User-Agent": "pubdev-test"},
        base_transport=httpx.MockTransport(handler),
    )


def test_satisfies_protocol() -> None:
    assert isinstance(HttpxTransport(), HttpTransport)


def test_from_settings() -> None:
    transport = HttpxTransport.from_settings(HttpSettings(timeout=5.0, user_agent="ua/1"))
    client = transport._get_client()
    assert client.timeout.read == 5.0
    assert client.headers["User-Agent"] == "ua/1"


@pytest.mark.asyncio
async def test_fetch_success() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": "http"}, headers={"Last-Modified": "yesterday"})

    async with make_transport(handler) as transport:
        response = await transport.fetch(RegistryEndpoints().search("http", "likes", 2))

    assert response.ok
    assert response.json() == {"name": "http"}
    assert response.header("last-modified") == "yesterday"
    assert response.reason == "OK"

    request = seen[0]
    assert request.url.path == "/api/search"
    assert dict(request.url.params) == {"q": "http", "sort": "likes", "page": "2"}
    assert request.headers["Accept"] == "application/json"
    assert request.headers["User-Agent"] == "pubdev-test"


@pytest.mark.asyncio
async def test_error_status_is_returned_not_raised() -> None:
    transport = make_transport(lambda request: httpx.Response(404, text="missing"))
    response = await transport.fetch(ResourceLocator(url="https://pub.dev/api/packages/nope"))

    assert response.status == 404
    assert not response.ok
    assert response.reason == "Not Found"
    assert response.text() == "missing"
    await transport.aclose()


@pytest.mark.asyncio
async def test_network_error_becomes_fetch_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = make_transport(handler)
    with pytest.raises(FetchFailure) as exc_info:
        await transport.fetch(ResourceLocator(url="https://pub.dev/api/packages/http"))

    assert exc_info.value.code == ErrorCode.NETWORK_ERROR
    assert exc_info.value.message == "Network error: connection refused"
    assert exc_info.value.recoverable
    await transport.aclose()


@pytest.mark.asyncio
async def test_timeout_becomes_fetch_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport = make_transport(handler)
    with pytest.raises(FetchFailure) as exc_info:
        await transport.fetch(ResourceLocator(url="https://pub.dev/api/packages/http"))

    assert exc_info.value.code == ErrorCode.TIMEOUT
    assert "timed out after 30.0s" in exc_info.value.message
    await transport.aclose()


def test_response_header_lookup_is_case_insensitive() -> None:
    response = TransportResponse(status=200, headers={"Content-Type": "text/html"})
    assert response.header("content-type") == "text/html"
    assert response.header("CONTENT-TYPE") == "text/html"
    assert response.header("etag") is None


def test_response_ok_range() -> None:
    assert TransportResponse(status=204).ok
    assert not TransportResponse(status=301).ok
    assert not TransportResponse(status=500).ok
