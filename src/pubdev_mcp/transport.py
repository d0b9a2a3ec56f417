"""HTTP transport collaborator for the fetch gateway.

The gateway only needs a status, case-insensitive header access and the raw
body; `HttpTransport` captures that contract so tests can script responses
without a network. `HttpxTransport` is the production implementation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import orjson
from pydantic import BaseModel, ConfigDict, Field

from .errors import ErrorCode, FetchFailure

if TYPE_CHECKING:
    import httpx

    from .settings import HttpSettings


class ResourceLocator(BaseModel):
    """Everything needed to perform one outbound fetch."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(..., description="Absolute request URL")
    params: dict[str, str] = Field(default_factory=dict, description="Query parameters")
    headers: dict[str, str] = Field(default_factory=dict, repr=False)


@dataclass(frozen=True, slots=True)
class TransportResponse:
    """Status, headers and body of a completed request."""

    status: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    reason: str = ""
    url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> str | None:
        """Get header value case-insensitively."""
        name_lower = name.lower()
        return next((v for k, v in self.headers.items() if k.lower() == name_lower), None)

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> object:
        return orjson.loads(self.body)


@runtime_checkable
class HttpTransport(Protocol):
    """Performs a GET for a resource locator.

    Implementations raise `FetchFailure` for network-level errors and return
    a `TransportResponse` for any HTTP answer, successful or not.
    """

    async def fetch(self, locator: ResourceLocator) -> TransportResponse: ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """`HttpTransport` backed by a lazily created `httpx.AsyncClient`.

    Example:
        >>> transport = HttpxTransport(timeout=10.0)
        >>> response = await transport.fetch(ResourceLocator(url="https://pub.dev/api/packages/http"))
        >>> response.status
        200
    """

    __slots__ = ("_client", "_timeout", "_follow_redirects", "_default_headers", "_base_transport")

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        follow_redirects: bool = True,
        default_headers: Mapping[str, str] | None = None,
        base_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client: httpx.AsyncClient | None = None
        self._timeout = timeout
        self._follow_redirects = follow_redirects
        self._default_headers = dict(default_headers or {})
        self._base_transport = base_transport

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> HttpxTransport:
        return cls(
            timeout=settings.timeout,
            follow_redirects=settings.follow_redirects,
            default_headers={"User-Agent": settings.user_agent},
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            import httpx

            self._client = httpx.AsyncClient(
                follow_redirects=self._follow_redirects,
                timeout=self._timeout,
                headers=self._default_headers,
                transport=self._base_transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, locator: ResourceLocator) -> TransportResponse:
        import httpx

        client = self._get_client()
        try:
            response = await client.get(
                locator.url,
                params=locator.params or None,
                headers=locator.headers or None,
            )
            body = await response.aread()
        except httpx.TimeoutException as e:
            raise FetchFailure(
                f"Request timed out after {self._timeout}s: {locator.url}",
                code=ErrorCode.TIMEOUT,
                recoverable=True,
            ) from e
        except httpx.HTTPError as e:
            raise FetchFailure(
                f"Network error: {e}",
                code=ErrorCode.NETWORK_ERROR,
                recoverable=True,
            ) from e

        return TransportResponse(
            status=response.status_code,
            body=body,
            headers=dict(response.headers),
            reason=response.reason_phrase,
            url=str(response.url),
        )

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()
