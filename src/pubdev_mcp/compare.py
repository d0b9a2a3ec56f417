"""Version ordering and dependency diffs.

Pure functions over version strings and name -> constraint mappings.

Example:
    >>> compare_versions("1.2.0", "1.10.0")
    <VersionOrdering.LESS: -1>
    >>> delta = dependency_delta({"a": "1.0", "b": "2.0"}, {"b": "2.0", "c": "3.0"})
    >>> delta.added, delta.removed
    ((('c', '3.0'),), (('a', '1.0'),))
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from itertools import zip_longest
from typing import NamedTuple


class VersionOrdering(IntEnum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


def _component(part: str) -> int:
    return int(part) if part.isascii() and part.isdigit() else 0


def parse_version(version: str) -> tuple[int, ...]:
    """Split a dotted version into integer components.

    Any component that is not a plain run of ASCII digits (``0-beta``,
    ``1+build``, ``1_0``) counts as 0.
    """
    return tuple(_component(p) for p in version.split("."))


def compare_versions(left: str, right: str) -> VersionOrdering:
    """Order two dotted-numeric versions component by component.

    The shorter version is padded with zeros, so ``1.0`` equals ``1.0.0``.
    """
    for a, b in zip_longest(parse_version(left), parse_version(right), fillvalue=0):
        if a < b:
            return VersionOrdering.LESS
        if a > b:
            return VersionOrdering.GREATER
    return VersionOrdering.EQUAL


class DependencyUpdate(NamedTuple):
    name: str
    old: str
    new: str


@dataclass(frozen=True, slots=True)
class DependencyDelta:
    """Added, removed and changed entries between two dependency maps."""

    added: tuple[tuple[str, str], ...] = ()
    removed: tuple[tuple[str, str], ...] = ()
    updated: tuple[DependencyUpdate, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.updated)

    def to_dict(self) -> dict[str, list[object]]:
        """Render in the tool output shape."""
        return {
            "added": [f"{name}: {spec}" for name, spec in self.added],
            "removed": [f"{name}: {spec}" for name, spec in self.removed],
            "updated": [{"package": u.name, "from": u.old, "to": u.new} for u in self.updated],
        }


def dependency_delta(old: Mapping[str, str], new: Mapping[str, str]) -> DependencyDelta:
    """Diff two name -> constraint mappings.

    Added entries follow `new`'s order; removed and updated entries follow
    `old`'s order. Constraints are compared as plain strings.
    """
    added = tuple((name, spec) for name, spec in new.items() if name not in old)
    removed = tuple((name, spec) for name, spec in old.items() if name not in new)
    updated = tuple(
        DependencyUpdate(name, spec, new[name])
        for name, spec in old.items()
        if name in new and new[name] != spec
    )
    return DependencyDelta(added=added, removed=removed, updated=updated)
