"""Fixed pub.dev resource-locator templates and cache keys."""

from __future__ import annotations

from typing import Final, Literal, get_args
from urllib.parse import quote

from .transport import ResourceLocator

DocType = Literal["readme", "changelog", "example", "api_docs"]
DOC_TYPES: Final[tuple[str, ...]] = get_args(DocType)

DOC_LABELS: Final[dict[str, str]] = {
    "readme": "README",
    "changelog": "CHANGELOG",
    "example": "Example",
    "api_docs": "API Documentation",
}

SearchSort = Literal["top", "text", "created", "updated", "popularity", "points", "likes"]

_JSON_HEADERS: Final[dict[str, str]] = {"Accept": "application/json"}


def package_key(name: str) -> str:
    return f"package-{name}"


def versions_key(name: str) -> str:
    return f"versions-{name}"


def search_key(query: str, sort: str, page: int) -> str:
    return f"search-{query}-{sort}-{page}"


def _segment(value: str) -> str:
    return quote(value, safe="")


class RegistryEndpoints:
    """Builds locators for the registry's REST API and documentation pages.

    Example:
        >>> RegistryEndpoints("https://pub.dev").package("http").url
        'https://pub.dev/api/packages/http'
    """

    __slots__ = ("_base_url", "_headers")

    def __init__(self, base_url: str = "https://pub.dev", *, user_agent: str | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = dict(_JSON_HEADERS)
        if user_agent:
            self._headers["User-Agent"] = user_agent

    @property
    def base_url(self) -> str:
        return self._base_url

    def package(self, name: str) -> ResourceLocator:
        return ResourceLocator(url=f"{self._base_url}/api/packages/{_segment(name)}", headers=self._headers)

    def versions(self, name: str) -> ResourceLocator:
        return ResourceLocator(url=f"{self._base_url}/api/packages/{_segment(name)}/versions", headers=self._headers)

    def search(self, query: str, sort: str, page: int) -> ResourceLocator:
        return ResourceLocator(
            url=f"{self._base_url}/api/search",
            params={"q": query, "sort": sort, "page": str(page)},
            headers=self._headers,
        )

    def documentation(self, name: str, doc_type: str, version: str | None = None) -> ResourceLocator:
        """Locator for a documentation page; `doc_type` must be one of `DOC_TYPES`."""
        if doc_type == "api_docs":
            return ResourceLocator(url=f"{self._base_url}/documentation/{_segment(name)}/{_segment(version or 'latest')}/")

        page = f"{self._base_url}/packages/{_segment(name)}"
        if version:
            page = f"{page}/versions/{_segment(version)}"
        return ResourceLocator(url=f"{page}/{doc_type}")
