"""Partial schemas for pub.dev API payloads.

Only the fields the tools read are modeled; everything else is ignored.
Optional upstream fields are ``X | None`` so downstream code never guesses at
raw dictionaries.
"""

from __future__ import annotations

from typing import Annotated

import orjson
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _normalize_spec(v: object) -> str:
    """Reduce a pubspec dependency value to a comparable string.

    Plain constraints stay as written, an empty constraint means ``any`` and
    structured sources (sdk, git, path, hosted) become canonical JSON text.
    """
    if v is None:
        return "any"
    if isinstance(v, str):
        return v
    return orjson.dumps(v, option=orjson.OPT_SORT_KEYS).decode()


DependencySpec = Annotated[str, BeforeValidator(_normalize_spec)]


def _empty_if_null(v: object) -> object:
    return {} if v is None else v


# An empty `dependencies:` key in pubspec.yaml arrives as null.
DependencyMap = Annotated[dict[str, DependencySpec], BeforeValidator(_empty_if_null)]


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Pubspec(_Payload):
    description: str | None = None
    homepage: str | None = None
    repository: str | None = None
    dependencies: DependencyMap = Field(default_factory=dict)
    dev_dependencies: DependencyMap = Field(default_factory=dict)


class VersionRecord(_Payload):
    """One published version of a package."""

    version: str
    published: str | None = None
    pubspec: Annotated[Pubspec, BeforeValidator(_empty_if_null)] = Field(default_factory=Pubspec)


class PackageDocument(_Payload):
    """``GET /api/packages/<name>``."""

    name: str
    latest: VersionRecord
    likes: int | None = None
    points: int | None = None
    popularity: float | None = None
    publishers: object | None = None
    uploaders: object | None = None


class VersionListing(_Payload):
    """``GET /api/packages/<name>/versions``, in registry order."""

    versions: list[VersionRecord] = Field(default_factory=list)

    def find(self, version: str) -> VersionRecord | None:
        return next((v for v in self.versions if v.version == version), None)

    def index(self, version: str) -> int:
        """Position of `version` in registry order, or -1."""
        return next((i for i, v in enumerate(self.versions) if v.version == version), -1)


class SearchHit(_Payload):
    package: str
    latest: VersionRecord | None = None
    points: int | None = None
    likes: int | None = None
    popularity: float | None = None


class SearchPage(_Payload):
    """``GET /api/search``."""

    count: int | None = None
    packages: list[SearchHit] = Field(default_factory=list)
    next: str | None = None
