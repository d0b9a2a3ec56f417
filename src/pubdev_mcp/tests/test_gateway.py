"""Tests for the cache-through fetch gateway."""

from __future__ import annotations

import pytest

from pubdev_mcp.cache import FRESHNESS_WINDOW
from pubdev_mcp.errors import ErrorCode, FetchFailure
from pubdev_mcp.gateway import FetchGateway
from pubdev_mcp.models import PackageDocument, VersionListing
from pubdev_mcp.resources import package_key, versions_key

PACKAGE_URL = "https://pub.dev/api/packages/http"
VERSIONS_URL = "https://pub.dev/api/packages/http/versions"


# ═══════════════════════════════════════════════════════════════════════════════
# Freshness
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_fresh_entry_served_without_fetch(gateway: FetchGateway, endpoints, transport, clock) -> None:
    """Second resolve inside the window hits the cache."""
    first = await gateway.resolve(package_key("http"), endpoints.package("http"), PackageDocument)
    clock.advance(FRESHNESS_WINDOW - 1)
    second = await gateway.resolve(package_key("http"), endpoints.package("http"), PackageDocument)

    assert transport.count(PACKAGE_URL) == 1
    assert second is first
    assert second.latest.version == "1.2.0"


@pytest.mark.asyncio
async def test_stale_entry_is_refetched(gateway: FetchGateway, endpoints, transport, clock, package_payload) -> None:
    await gateway.resolve(package_key("http"), endpoints.package("http"), PackageDocument)

    package_payload["latest"]["version"] = "1.3.0"
    transport.add_json(PACKAGE_URL, package_payload)
    clock.advance(FRESHNESS_WINDOW)

    doc = await gateway.resolve(package_key("http"), endpoints.package("http"), PackageDocument)
    assert transport.count(PACKAGE_URL) == 2
    assert doc.latest.version == "1.3.0"
    assert gateway.cache.peek(package_key("http")).payload is doc  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_entry_timestamped_at_request_start(gateway: FetchGateway, endpoints, clock) -> None:
    started = clock.now
    await gateway.resolve(package_key("http"), endpoints.package("http"))
    assert gateway.cache.peek(package_key("http")).stored_at == started  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_keys_are_isolated(gateway: FetchGateway, endpoints, transport) -> None:
    await gateway.resolve(package_key("http"), endpoints.package("http"), PackageDocument)
    await gateway.resolve(versions_key("http"), endpoints.versions("http"), VersionListing)

    assert transport.count(PACKAGE_URL) == 1
    assert transport.count(VERSIONS_URL) == 1
    assert len(gateway.cache) == 2


@pytest.mark.asyncio
async def test_raw_payload_without_schema(gateway: FetchGateway, endpoints, package_payload) -> None:
    payload = await gateway.resolve(package_key("http"), endpoints.package("http"))
    assert payload == package_payload


@pytest.mark.asyncio
async def test_empty_key_rejected(gateway: FetchGateway, endpoints, transport) -> None:
    with pytest.raises(ValueError):
        await gateway.resolve("", endpoints.package("http"))
    assert transport.calls == []


# ═══════════════════════════════════════════════════════════════════════════════
# Failures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_error_status_raises_and_skips_cache(gateway: FetchGateway, endpoints) -> None:
    with pytest.raises(FetchFailure) as exc_info:
        await gateway.resolve(package_key("nope"), endpoints.package("nope"))

    assert exc_info.value.message == "HTTP 404: Not Found"
    assert exc_info.value.code == ErrorCode.NOT_FOUND
    assert exc_info.value.status == 404
    assert package_key("nope") not in gateway.cache


@pytest.mark.asyncio
async def test_server_error_is_recoverable(gateway: FetchGateway, endpoints, transport) -> None:
    transport.add_body(PACKAGE_URL, "", status=503, reason="Service Unavailable")
    with pytest.raises(FetchFailure) as exc_info:
        await gateway.resolve(package_key("http"), endpoints.package("http"))

    assert exc_info.value.message == "HTTP 503: Service Unavailable"
    assert exc_info.value.code == ErrorCode.EXTERNAL_SERVICE_ERROR
    assert exc_info.value.recoverable


@pytest.mark.asyncio
async def test_failure_leaves_stale_entry_untouched(gateway: FetchGateway, endpoints, transport, clock) -> None:
    """A failed refresh neither serves nor replaces the expired entry."""
    await gateway.resolve(package_key("http"), endpoints.package("http"))
    before = gateway.cache.peek(package_key("http"))

    clock.advance(FRESHNESS_WINDOW + 1)
    transport.add_body(PACKAGE_URL, "", status=500, reason="Internal Server Error")

    with pytest.raises(FetchFailure):
        await gateway.resolve(package_key("http"), endpoints.package("http"))
    assert gateway.cache.peek(package_key("http")) is before


@pytest.mark.asyncio
async def test_transport_failure_propagates(gateway: FetchGateway, endpoints, transport) -> None:
    transport.fail(PACKAGE_URL, FetchFailure("Network error: connection refused", code=ErrorCode.NETWORK_ERROR))
    with pytest.raises(FetchFailure, match="connection refused"):
        await gateway.resolve(package_key("http"), endpoints.package("http"))
    assert len(gateway.cache) == 0


@pytest.mark.asyncio
async def test_malformed_body_is_parse_error(gateway: FetchGateway, endpoints, transport) -> None:
    transport.add_body(PACKAGE_URL, "<html>not json</html>")
    with pytest.raises(FetchFailure) as exc_info:
        await gateway.resolve(package_key("http"), endpoints.package("http"))

    assert exc_info.value.code == ErrorCode.PARSE_ERROR
    assert len(gateway.cache) == 0


@pytest.mark.asyncio
async def test_unexpected_shape_is_parse_error(gateway: FetchGateway, endpoints, transport) -> None:
    transport.add_json(PACKAGE_URL, {"name": "http"})  # no "latest"
    with pytest.raises(FetchFailure) as exc_info:
        await gateway.resolve(package_key("http"), endpoints.package("http"), PackageDocument)

    assert exc_info.value.code == ErrorCode.PARSE_ERROR
    assert package_key("http") not in gateway.cache


# ═══════════════════════════════════════════════════════════════════════════════
# Uncached pages
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_fetch_page_is_never_cached(gateway: FetchGateway, endpoints, transport) -> None:
    locator = endpoints.documentation("http", "readme")
    transport.add_body(locator.url, "<p>Hello</p>")

    first = await gateway.fetch_page(locator)
    second = await gateway.fetch_page(locator)

    assert first.ok and second.ok
    assert transport.count(locator.url) == 2
    assert len(gateway.cache) == 0


@pytest.mark.asyncio
async def test_fetch_page_returns_error_status(gateway: FetchGateway, endpoints) -> None:
    response = await gateway.fetch_page(endpoints.documentation("http", "changelog", "9.9.9"))
    assert response.status == 404
    assert not response.ok


@pytest.mark.asyncio
async def test_aclose_closes_transport(gateway: FetchGateway, transport) -> None:
    await gateway.aclose()
    assert transport.closed
