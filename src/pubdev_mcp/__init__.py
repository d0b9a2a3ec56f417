"""pubdev-mcp - pub.dev package registry tools over the Model Context Protocol.

Six tools (package info, update checks, version history, documentation,
version comparison, search) backed by a cache-through fetch gateway and a
dotted-numeric version comparator.

Quick Start:
    >>> from pubdev_mcp import create_tool_server
    >>> server = create_tool_server()
    >>> await server.invoke("get_package_info", {"packageName": "http"})
    {'content': [{'type': 'text', 'text': '{\\n  "package": ...'}]}

Run as an MCP server (stdio):
    $ pubdev-mcp
"""

from __future__ import annotations

__version__ = "1.0.0"

from .cache import FRESHNESS_WINDOW, CacheEntry, ResponseCache
from .compare import (
    DependencyDelta,
    DependencyUpdate,
    VersionOrdering,
    compare_versions,
    dependency_delta,
)
from .core import BaseTool, ToolMetadata
from .errors import (
    ErrorCode,
    FetchFailure,
    InvalidArguments,
    MissingArguments,
    NotFound,
    ToolError,
    ToolException,
    UnknownTool,
    UnsupportedDocType,
)
from .gateway import FetchGateway
from .registry import ToolRegistry
from .server import MCPServer, ToolServer, create_mcp_server, create_tool_server, serve_mcp
from .settings import PubDevSettings, get_settings
from .transport import HttpTransport, HttpxTransport, ResourceLocator, TransportResponse

__all__ = [
    "__version__",
    # Cache & gateway
    "FRESHNESS_WINDOW", "CacheEntry", "ResponseCache", "FetchGateway",
    # Transport
    "HttpTransport", "HttpxTransport", "ResourceLocator", "TransportResponse",
    # Comparison
    "VersionOrdering", "compare_versions", "DependencyDelta", "DependencyUpdate", "dependency_delta",
    # Tools & server
    "BaseTool", "ToolMetadata", "ToolRegistry", "ToolServer", "MCPServer",
    "create_tool_server", "create_mcp_server", "serve_mcp",
    # Errors
    "ErrorCode", "ToolError", "ToolException", "FetchFailure", "NotFound",
    "UnsupportedDocType", "MissingArguments", "InvalidArguments", "UnknownTool",
    # Settings
    "PubDevSettings", "get_settings",
]
