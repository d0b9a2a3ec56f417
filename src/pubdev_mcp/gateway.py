"""Fetch-cache gateway: the single chokepoint for outbound registry requests.

`resolve` serves a cached payload while it is fresh and otherwise fetches,
parses, validates and stores a new one. A failed fetch never touches the
cache, there is no retry, and an expired entry is never served as a
fallback.
"""

from __future__ import annotations

from typing import TypeVar, overload

import orjson
from pydantic import BaseModel, ValidationError

from .cache import ResponseCache
from .errors import ErrorCode, FetchFailure
from .logging import BoundLogger, get_logger
from .transport import HttpTransport, ResourceLocator, TransportResponse

M = TypeVar("M", bound=BaseModel)


class FetchGateway:
    """Cache-through access to registry resources.

    Args:
        transport: Outbound HTTP collaborator
        cache: Response store (a fresh `ResponseCache` if omitted)
        log: Logger to bind gateway context onto

    Example:
        >>> gateway = FetchGateway(HttpxTransport())
        >>> doc = await gateway.resolve("package-http", endpoints.package("http"), PackageDocument)
        >>> doc.latest.version
        '1.2.2'
    """

    __slots__ = ("_transport", "_cache", "_log")

    def __init__(
        self,
        transport: HttpTransport,
        cache: ResponseCache | None = None,
        *,
        log: BoundLogger | None = None,
    ) -> None:
        self._transport = transport
        self._cache = cache if cache is not None else ResponseCache()
        self._log = log or get_logger("pubdev_mcp.gateway")

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @overload
    async def resolve(self, key: str, locator: ResourceLocator, schema: type[M]) -> M: ...

    @overload
    async def resolve(self, key: str, locator: ResourceLocator, schema: None = None) -> object: ...

    async def resolve(
        self,
        key: str,
        locator: ResourceLocator,
        schema: type[BaseModel] | None = None,
    ) -> object:
        """Return the payload for `key`, fetching only when no fresh entry exists.

        Args:
            key: Logical resource identifier (endpoint + parameters)
            locator: How to fetch the resource on a miss
            schema: Optional model the parsed body must validate against;
                the validated model is what gets cached

        Raises:
            FetchFailure: Non-2xx status, network error, or a body that does
                not parse or validate
        """
        if not key:
            raise ValueError("cache key must be a non-empty string")

        requested_at = self._cache.now()
        entry = self._cache.lookup(key)
        if entry is not None:
            self._log.debug("cache hit", key=key)
            return entry.payload

        self._log.debug("cache miss", key=key, url=locator.url)
        response = await self._fetch(locator)
        if not response.ok:
            self._log.warning("fetch failed", key=key, url=locator.url, status=response.status)
            raise FetchFailure.from_status(response.status, response.reason)

        payload = self._parse(key, response, schema)
        self._cache.store(key, payload, stored_at=requested_at)
        self._log.debug("cache store", key=key)
        return payload

    async def fetch_page(self, locator: ResourceLocator) -> TransportResponse:
        """Fetch a page without caching; any HTTP status is returned as-is."""
        self._log.debug("page fetch", url=locator.url)
        return await self._fetch(locator)

    async def aclose(self) -> None:
        await self._transport.aclose()

    async def _fetch(self, locator: ResourceLocator) -> TransportResponse:
        try:
            return await self._transport.fetch(locator)
        except FetchFailure as e:
            self._log.warning("transport error", url=locator.url, error=e.message)
            raise

    def _parse(self, key: str, response: TransportResponse, schema: type[BaseModel] | None) -> object:
        try:
            body = response.json()
        except orjson.JSONDecodeError as e:
            self._log.warning("malformed body", key=key, error=str(e))
            raise FetchFailure(
                f"Malformed response body from {response.url or key}: {e}",
                status=response.status,
                code=ErrorCode.PARSE_ERROR,
            ) from e

        if schema is None:
            return body
        try:
            return schema.model_validate(body)
        except ValidationError as e:
            self._log.warning("unexpected payload shape", key=key, errors=e.error_count())
            raise FetchFailure(
                f"Unexpected response shape from {response.url or key}: {e.error_count()} validation error(s)",
                status=response.status,
                code=ErrorCode.PARSE_ERROR,
            ) from e
