"""Update checks and version-to-version comparison."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import Field

from ..compare import VersionOrdering, compare_versions, dependency_delta
from ..core import BaseTool, ToolMetadata, ToolOutput, ToolParams
from ..errors import NotFound
from ..models import PackageDocument, VersionListing, VersionRecord
from ..resources import package_key, versions_key

# ─────────────────────────────────────────────────────────────────────────────
# check_package_updates
# ─────────────────────────────────────────────────────────────────────────────


class UpdateCheckParams(ToolParams):
    package_name: str = Field(..., min_length=1, description="Name of the package to check for updates")
    current_version: str | None = Field(default=None, description="Current version to compare against (optional)")


class UpdateStatus(ToolOutput):
    package_name: str
    current_version: str
    latest_version: str
    latest_published: str | None = None
    update_available: bool = False
    versions_behind: int = 0


class CheckPackageUpdatesTool(BaseTool[UpdateCheckParams]):
    """Compare a caller's version against the registry's latest.

    `versionsBehind` is the distance between the two versions in the
    registry's own list order (newest first on pub.dev); the list is not
    re-sorted, and it stays 0 unless both versions appear in it.
    """

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="check_package_updates",
        description="Check for updates to a specific package or compare versions",
    )
    params_schema: ClassVar[type[UpdateCheckParams]] = UpdateCheckParams

    async def _async_run(self, params: UpdateCheckParams) -> UpdateStatus:
        name = params.package_name
        doc = await self.gateway.resolve(package_key(name), self.endpoints.package(name), PackageDocument)
        latest = doc.latest.version
        status = UpdateStatus(
            package_name=name,
            current_version=params.current_version or "unknown",
            latest_version=latest,
            latest_published=doc.latest.published,
        )

        current = params.current_version
        if not current:
            return status

        status.update_available = compare_versions(current, latest) is VersionOrdering.LESS

        listing = await self.gateway.resolve(versions_key(name), self.endpoints.versions(name), VersionListing)
        current_index = listing.index(current)
        latest_index = listing.index(latest)
        if current_index > -1 and latest_index > -1:
            status.versions_behind = current_index - latest_index
        else:
            self._log.debug("version not in listing", current=current, latest=latest)
        return status


# ─────────────────────────────────────────────────────────────────────────────
# compare_package_versions
# ─────────────────────────────────────────────────────────────────────────────

Direction = Literal["upgrade", "downgrade", "same"]

_DIRECTIONS: dict[VersionOrdering, Direction] = {
    VersionOrdering.LESS: "upgrade",
    VersionOrdering.GREATER: "downgrade",
    VersionOrdering.EQUAL: "same",
}


class CompareParams(ToolParams):
    package_name: str = Field(..., min_length=1, description="Name of the package to compare")
    from_version: str = Field(..., min_length=1, description="Source version to compare from")
    to_version: str = Field(..., min_length=1, description="Target version to compare to")


class VersionSnapshot(ToolOutput):
    version: str
    published: str | None = None
    dependencies: dict[str, str]
    dev_dependencies: dict[str, str]

    @classmethod
    def of(cls, record: VersionRecord) -> VersionSnapshot:
        return cls(
            version=record.version,
            published=record.published,
            dependencies=record.pubspec.dependencies,
            dev_dependencies=record.pubspec.dev_dependencies,
        )


class VersionPair(ToolOutput):
    from_: VersionSnapshot = Field(alias="from")
    to: VersionSnapshot


class ChangeSet(ToolOutput):
    dependency_changes: dict[str, list[object]]
    dev_dependency_changes: dict[str, list[object]]


class ComparisonOutput(ToolOutput):
    package_name: str
    direction: Direction
    comparison: VersionPair
    changes: ChangeSet


class ComparePackageVersionsTool(BaseTool[CompareParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="compare_package_versions",
        description="Compare two versions of a package and show differences",
    )
    params_schema: ClassVar[type[CompareParams]] = CompareParams

    async def _async_run(self, params: CompareParams) -> ComparisonOutput:
        name = params.package_name
        listing = await self.gateway.resolve(versions_key(name), self.endpoints.versions(name), VersionListing)

        old = listing.find(params.from_version)
        new = listing.find(params.to_version)
        if old is None or new is None:
            absent = [v for v, rec in ((params.from_version, old), (params.to_version, new)) if rec is None]
            raise NotFound(f"One or both versions not found: {', '.join(absent)}")

        return ComparisonOutput(
            package_name=name,
            direction=_DIRECTIONS[compare_versions(old.version, new.version)],
            comparison=VersionPair(from_=VersionSnapshot.of(old), to=VersionSnapshot.of(new)),
            changes=ChangeSet(
                dependency_changes=dependency_delta(old.pubspec.dependencies, new.pubspec.dependencies).to_dict(),
                dev_dependency_changes=dependency_delta(
                    old.pubspec.dev_dependencies, new.pubspec.dev_dependencies
                ).to_dict(),
            ),
        )
