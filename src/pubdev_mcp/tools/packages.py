"""Package metadata, version listing and search tools."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from ..core import BaseTool, ToolMetadata, ToolOutput, ToolParams
from ..models import PackageDocument, SearchPage, VersionListing
from ..resources import SearchSort, package_key, search_key, versions_key

# ─────────────────────────────────────────────────────────────────────────────
# get_package_info
# ─────────────────────────────────────────────────────────────────────────────


class PackageInfoParams(ToolParams):
    package_name: str = Field(..., min_length=1, description="Name of the package to retrieve information for")


class PackageInfo(ToolOutput):
    name: str
    version: str
    description: str | None = None
    homepage: str | None = None
    repository: str | None = None
    published_at: str | None = None
    dependencies: dict[str, str] | None = None
    dev_dependencies: dict[str, str] | None = None


class PackageStats(ToolOutput):
    likes: int | None = None
    points: int | None = None
    popularity: float | None = None


class PackageInfoOutput(ToolOutput):
    package: PackageInfo
    stats: PackageStats
    publishers: object | None = None
    uploaders: object | None = None


class GetPackageInfoTool(BaseTool[PackageInfoParams]):
    """Latest release metadata plus popularity stats."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="get_package_info",
        description="Get detailed information about a Dart/Flutter package from pub.dev",
    )
    params_schema: ClassVar[type[PackageInfoParams]] = PackageInfoParams

    async def _async_run(self, params: PackageInfoParams) -> PackageInfoOutput:
        name = params.package_name
        doc = await self.gateway.resolve(package_key(name), self.endpoints.package(name), PackageDocument)
        latest = doc.latest
        pubspec = latest.pubspec
        return PackageInfoOutput(
            package=PackageInfo(
                name=doc.name,
                version=latest.version,
                description=pubspec.description,
                homepage=pubspec.homepage,
                repository=pubspec.repository,
                published_at=latest.published,
                dependencies=pubspec.dependencies or None,
                dev_dependencies=pubspec.dev_dependencies or None,
            ),
            stats=PackageStats(likes=doc.likes, points=doc.points, popularity=doc.popularity),
            publishers=doc.publishers,
            uploaders=doc.uploaders,
        )


# ─────────────────────────────────────────────────────────────────────────────
# get_package_versions
# ─────────────────────────────────────────────────────────────────────────────


class PackageVersionsParams(ToolParams):
    package_name: str = Field(..., min_length=1, description="Name of the package to get versions for")
    limit: int = Field(default=10, ge=0, description="Maximum number of versions to return (default: 10)")


class VersionSummary(ToolOutput):
    version: str
    published_at: str | None = None
    description: str | None = None


class PackageVersionsOutput(ToolOutput):
    package_name: str
    total_versions: int
    versions: list[VersionSummary]


class GetPackageVersionsTool(BaseTool[PackageVersionsParams]):
    """First `limit` versions in registry order."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="get_package_versions",
        description="Get all available versions of a package with their release dates",
    )
    params_schema: ClassVar[type[PackageVersionsParams]] = PackageVersionsParams

    async def _async_run(self, params: PackageVersionsParams) -> PackageVersionsOutput:
        name = params.package_name
        listing = await self.gateway.resolve(versions_key(name), self.endpoints.versions(name), VersionListing)
        return PackageVersionsOutput(
            package_name=name,
            total_versions=len(listing.versions),
            versions=[
                VersionSummary(version=v.version, published_at=v.published, description=v.pubspec.description)
                for v in listing.versions[: params.limit]
            ],
        )


# ─────────────────────────────────────────────────────────────────────────────
# search_packages
# ─────────────────────────────────────────────────────────────────────────────


class SearchParams(ToolParams):
    query: str = Field(..., min_length=1, description="Search query")
    sort: SearchSort = Field(default="top", description="Sort order for results")
    page: int = Field(default=1, ge=1, description="Page number for pagination (default: 1)")


class SearchResult(ToolOutput):
    name: str
    version: str | None = None
    description: str | None = None
    points: int | None = None
    likes: int | None = None
    popularity: float | None = None
    published_at: str | None = None


class SearchOutput(ToolOutput):
    query: str
    sort: str
    page: int
    total_results: int | None = None
    packages: list[SearchResult]


class SearchPackagesTool(BaseTool[SearchParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="search_packages",
        description="Search for packages on pub.dev with filters",
        category="search",
    )
    params_schema: ClassVar[type[SearchParams]] = SearchParams

    async def _async_run(self, params: SearchParams) -> SearchOutput:
        page = await self.gateway.resolve(
            search_key(params.query, params.sort, params.page),
            self.endpoints.search(params.query, params.sort, params.page),
            SearchPage,
        )
        results = []
        for hit in page.packages:
            latest = hit.latest
            results.append(SearchResult(
                name=hit.package,
                version=latest.version if latest else None,
                description=latest.pubspec.description if latest else None,
                points=hit.points,
                likes=hit.likes,
                popularity=hit.popularity,
                published_at=latest.published if latest else None,
            ))
        return SearchOutput(
            query=params.query,
            sort=params.sort,
            page=params.page,
            total_results=page.count,
            packages=results,
        )
