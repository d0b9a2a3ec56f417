"""Tool-call protocol surface.

`ToolServer` applies the envelope policy: every call answers
``{"content": [{"type": "text", "text": ...}]}`` and failures become
``Error: <message>`` text instead of protocol faults. `MCPServer` exposes the
same tools over MCP via FastMCP.

Example:
    >>> from pubdev_mcp.server import serve_mcp
    >>> serve_mcp()  # stdio, configured from PUBDEV_MCP_* environment

Requires: fastmcp (for MCPServer)
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Literal

from .errors import ToolError, ToolException
from .gateway import FetchGateway
from .logging import BoundLogger, get_logger, log_context
from .settings import PubDevSettings, get_settings
from .tools import build_registry
from .transport import HttpTransport, HttpxTransport

if TYPE_CHECKING:
    from .registry import ToolRegistry

Transport = Literal["stdio", "sse", "streamable-http"]
Envelope = dict[str, list[dict[str, str]]]


def envelope(text: str) -> Envelope:
    return {"content": [{"type": "text", "text": text}]}


class ToolServer:
    """Dispatches tool calls and wraps every outcome in a text envelope."""

    __slots__ = ("_name", "_registry", "_log")

    def __init__(self, name: str, registry: ToolRegistry, *, log: BoundLogger | None = None) -> None:
        self._name = name
        self._registry = registry
        self._log = log or get_logger("pubdev_mcp.server")

    @property
    def name(self) -> str:
        return self._name

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    def list_tools(self) -> list[dict[str, object]]:
        """Name, description and argument schema of every enabled tool."""
        return [
            {
                "name": tool.metadata.name,
                "description": tool.metadata.description,
                "inputSchema": tool.input_schema(),
            }
            for tool in self._registry.enabled()
        ]

    async def invoke(self, tool_name: str, arguments: Mapping[str, object] | None) -> Envelope:
        """Invoke a tool by name with a raw argument map.

        Never raises; errors are returned as ``Error:`` text.
        """
        with log_context(tool=tool_name):
            start = time.perf_counter()
            try:
                tool = self._registry.resolve(tool_name)
                text = await tool.arun(tool.validate(arguments))
            except ToolException as e:
                error = ToolError.from_tool_exception(tool_name, e)
                self._log.warning("tool failed", code=error.code.value, error=error.message)
                return envelope(error.render())
            except Exception as e:
                error = ToolError.from_exception(tool_name, e)
                self._log.exception("tool crashed", code=error.code.value)
                return envelope(error.render())

            self._log.info("tool completed", duration_ms=round((time.perf_counter() - start) * 1000, 2))
            return envelope(text)


class MCPServer(ToolServer):
    """The tool server exposed to MCP clients through FastMCP.

    Each tool is registered with its JSON schema, but arguments are passed
    through untouched so validation errors stay inside the envelope policy.

    Example:
        >>> server = MCPServer("pubdev-mcp-server", registry)
        >>> server.run(transport="sse", port=8080)
    """

    __slots__ = ("_mcp",)

    def __init__(self, name: str, registry: ToolRegistry, *, log: BoundLogger | None = None) -> None:
        super().__init__(name, registry, log=log)
        self._mcp = self._create_server()

    def _create_server(self):
        try:
            from fastmcp import FastMCP
            from fastmcp.tools import Tool
            from fastmcp.tools.tool import ToolResult
            from mcp.types import TextContent
        except ImportError as e:
            raise ImportError(
                "MCP integration requires fastmcp. Install with: pip install fastmcp"
            ) from e

        server = self

        class EnvelopeTool(Tool):
            async def run(self, arguments: dict[str, object]) -> ToolResult:
                result = await server.invoke(self.name, arguments)
                return ToolResult(content=[TextContent(type="text", text=c["text"]) for c in result["content"]])

        mcp = FastMCP(self._name, instructions="Dart/Flutter package information from pub.dev")
        for spec in self.list_tools():
            mcp.add_tool(EnvelopeTool(
                name=str(spec["name"]),
                description=str(spec["description"]),
                parameters=spec["inputSchema"],  # type: ignore[arg-type]
            ))
        return mcp

    def run(self, transport: Transport = "stdio", *, host: str = "127.0.0.1", port: int = 8080) -> None:
        """Serve until interrupted; `host` and `port` apply to the HTTP transports only."""
        self._log.info("server starting", server=self._name, transport=transport)
        if transport == "stdio":
            self._mcp.run()
        else:
            self._mcp.run(transport=transport, host=host, port=port)

    @property
    def fastmcp(self):
        """The wrapped FastMCP application."""
        return self._mcp


# ═══════════════════════════════════════════════════════════════════════════════
# Factory Functions
# ═══════════════════════════════════════════════════════════════════════════════


def create_gateway(settings: PubDevSettings | None = None, transport: HttpTransport | None = None) -> FetchGateway:
    settings = settings or get_settings()
    return FetchGateway(transport or HttpxTransport.from_settings(settings.http))


def create_tool_server(
    settings: PubDevSettings | None = None,
    transport: HttpTransport | None = None,
) -> ToolServer:
    """Envelope server without the MCP layer (embedding, tests)."""
    settings = settings or get_settings()
    registry = build_registry(create_gateway(settings, transport), settings)
    return ToolServer(settings.server_name, registry)


def create_mcp_server(
    settings: PubDevSettings | None = None,
    transport: HttpTransport | None = None,
) -> MCPServer:
    """MCP server over the configured registry, not yet running."""
    settings = settings or get_settings()
    registry = build_registry(create_gateway(settings, transport), settings)
    return MCPServer(settings.server_name, registry)


def serve_mcp(settings: PubDevSettings | None = None) -> None:
    """Expose the registry tools via MCP using the configured transport."""
    settings = settings or get_settings()
    server = create_mcp_server(settings)
    server.run(transport=settings.transport, host=settings.host, port=settings.port)
