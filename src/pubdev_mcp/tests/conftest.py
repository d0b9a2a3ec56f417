"""Shared fakes: a manual clock and a scripted registry transport."""

from __future__ import annotations

import orjson
import pytest

from pubdev_mcp.cache import ResponseCache
from pubdev_mcp.gateway import FetchGateway
from pubdev_mcp.logging import configure_logging
from pubdev_mcp.resources import RegistryEndpoints
from pubdev_mcp.server import ToolServer
from pubdev_mcp.tools import build_registry
from pubdev_mcp.transport import ResourceLocator, TransportResponse

BASE = "https://pub.dev"


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Answers by URL; unknown URLs get a 404. Records every request."""

    def __init__(self) -> None:
        self.routes: dict[str, TransportResponse | Exception] = {}
        self.calls: list[ResourceLocator] = []
        self.closed = False

    def add_json(self, url: str, payload: object, *, status: int = 200, reason: str = "OK") -> None:
        self.routes[url] = TransportResponse(status=status, body=orjson.dumps(payload), reason=reason, url=url)

    def add_body(
        self,
        url: str,
        body: str | bytes,
        *,
        status: int = 200,
        reason: str = "OK",
        headers: dict[str, str] | None = None,
    ) -> None:
        raw = body.encode() if isinstance(body, str) else body
        self.routes[url] = TransportResponse(status=status, body=raw, headers=headers or {}, reason=reason, url=url)

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    def count(self, url: str) -> int:
        return sum(1 for c in self.calls if c.url == url)

    async def fetch(self, locator: ResourceLocator) -> TransportResponse:
        self.calls.append(locator)
        route = self.routes.get(locator.url)
        if route is None:
            return TransportResponse(status=404, reason="Not Found", url=locator.url)
        if isinstance(route, Exception):
            raise route
        return route

    async def aclose(self) -> None:
        self.closed = True


def _version(version: str, published: str, deps: dict[str, object], dev: dict[str, object] | None = None) -> dict:
    return {
        "version": version,
        "published": published,
        "pubspec": {
            "name": "http",
            "description": "A composable, multi-platform, Future-based API for HTTP requests.",
            "repository": "https://github.com/dart-lang/http",
            "dependencies": deps,
            "dev_dependencies": dev or {"test": "^1.21.0"},
        },
    }


@pytest.fixture
def versions_payload() -> dict:
    # Newest first, as the registry lists them.
    return {
        "versions": [
            _version("1.2.0", "2024-01-10T18:00:00Z", {"async": "^2.5.0", "meta": "^1.3.0", "web": "^0.5.0"}),
            _version("1.1.2", "2023-12-05T18:00:00Z", {"async": "^2.5.0", "meta": "^1.3.0"}),
            _version("1.1.0", "2023-06-01T18:00:00Z", {"async": "^2.5.0", "meta": "^1.1.0"}),
            _version(
                "1.0.0",
                "2023-05-10T18:00:00Z",
                {"async": "^2.5.0", "path": "^1.8.0", "flutter": {"sdk": "flutter"}},
                {"test": "^1.16.0", "lints": None},
            ),
        ]
    }


@pytest.fixture
def package_payload(versions_payload: dict) -> dict:
    return {
        "name": "http",
        "latest": versions_payload["versions"][0],
        "likes": 7800,
        "points": 160,
        "popularity": 0.99,
        "publishers": ["dart.dev"],
        "uploaders": None,
        "archive_url": "https://pub.dev/packages/http/versions/1.2.0.tar.gz",
    }


@pytest.fixture
def search_payload() -> dict:
    return {
        "count": 2,
        "packages": [
            {"package": "http", "latest": {"version": "1.2.0", "published": "2024-01-10T18:00:00Z",
                                           "pubspec": {"description": "HTTP requests."}},
             "points": 160, "likes": 7800, "popularity": 0.99},
            {"package": "dio", "points": 150},
        ],
    }


@pytest.fixture(autouse=True)
def quiet_logs() -> None:
    configure_logging("none")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCache:
    return ResponseCache(clock=clock)


@pytest.fixture
def transport(package_payload: dict, versions_payload: dict, search_payload: dict) -> FakeTransport:
    t = FakeTransport()
    t.add_json(f"{BASE}/api/packages/http", package_payload)
    t.add_json(f"{BASE}/api/packages/http/versions", versions_payload)
    t.add_json(f"{BASE}/api/search", search_payload)
    return t


@pytest.fixture
def gateway(transport: FakeTransport, cache: ResponseCache) -> FetchGateway:
    return FetchGateway(transport, cache)


@pytest.fixture
def endpoints() -> RegistryEndpoints:
    return RegistryEndpoints(BASE)


@pytest.fixture
def server(gateway: FetchGateway) -> ToolServer:
    return ToolServer("pubdev-test", build_registry(gateway))
