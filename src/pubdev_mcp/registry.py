"""Name-keyed catalogue of the tools a server exposes."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel

from .core import BaseTool
from .errors import UnknownTool

Tool = BaseTool[BaseModel]


class ToolRegistry:
    """Tools in registration order, addressed by their protocol name.

    A disabled tool stays registered but is neither listed nor callable.

    Example:
        >>> registry = ToolRegistry([GetPackageInfoTool(gateway)])
        >>> registry.resolve("get_package_info")
        <GetPackageInfoTool get_package_info>
        >>> registry.resolve("publish_package")
        Traceback (most recent call last):
        pubdev_mcp.errors.UnknownTool: Unknown tool: publish_package
    """

    __slots__ = ("_by_name",)

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._by_name: dict[str, Tool] = {}
        self.register_all(*tools)

    def register(self, tool: Tool) -> None:
        name = tool.metadata.name
        if name in self._by_name:
            raise ValueError(f"Duplicate tool name: {name}")
        self._by_name[name] = tool

    def register_all(self, *tools: Tool) -> None:
        for tool in tools:
            self.register(tool)

    def unregister(self, name: str) -> bool:
        return self._by_name.pop(name, None) is not None

    def get(self, name: str) -> Tool | None:
        return self._by_name.get(name)

    def resolve(self, name: str) -> Tool:
        """The callable tool registered as `name`.

        Raises:
            UnknownTool: Nothing registered under `name`, or it is disabled
        """
        tool = self._by_name.get(name)
        if tool is None or not tool.metadata.enabled:
            raise UnknownTool(name)
        return tool

    def enabled(self) -> list[Tool]:
        return [t for t in self._by_name.values() if t.metadata.enabled]

    def categories(self) -> set[str]:
        return {t.metadata.category for t in self._by_name.values()}

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._by_name.values())
