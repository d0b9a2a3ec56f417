"""pub.dev registry tools.

- get_package_info: latest release metadata and stats
- check_package_updates: latest version vs. a caller's version
- get_package_versions: version history
- get_documentation_changes: README / CHANGELOG / example / API docs
- compare_package_versions: dependency changes between two versions
- search_packages: registry search
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..registry import ToolRegistry
from ..resources import RegistryEndpoints
from .docs import GetDocumentationChangesTool
from .packages import GetPackageInfoTool, GetPackageVersionsTool, SearchPackagesTool
from .updates import CheckPackageUpdatesTool, ComparePackageVersionsTool

if TYPE_CHECKING:
    from ..core import BaseTool
    from ..gateway import FetchGateway
    from ..settings import PubDevSettings


def default_tools(
    gateway: FetchGateway,
    endpoints: RegistryEndpoints | None = None,
    *,
    max_doc_chars: int | None = None,
) -> list[BaseTool]:
    """Instantiate every registry tool against one shared gateway."""
    endpoints = endpoints or RegistryEndpoints()
    docs_kwargs = {"max_chars": max_doc_chars} if max_doc_chars else {}
    return [
        GetPackageInfoTool(gateway, endpoints),
        CheckPackageUpdatesTool(gateway, endpoints),
        GetPackageVersionsTool(gateway, endpoints),
        GetDocumentationChangesTool(gateway, endpoints, **docs_kwargs),
        ComparePackageVersionsTool(gateway, endpoints),
        SearchPackagesTool(gateway, endpoints),
    ]


def build_registry(gateway: FetchGateway, settings: PubDevSettings | None = None) -> ToolRegistry:
    """Registry of all tools, configured from `settings` when given."""
    registry = ToolRegistry()
    if settings is None:
        registry.register_all(*default_tools(gateway))
    else:
        endpoints = RegistryEndpoints(settings.http.base_url, user_agent=settings.http.user_agent)
        registry.register_all(*default_tools(gateway, endpoints, max_doc_chars=settings.docs.max_chars))
    return registry


__all__ = [
    "GetPackageInfoTool",
    "CheckPackageUpdatesTool",
    "GetPackageVersionsTool",
    "GetDocumentationChangesTool",
    "ComparePackageVersionsTool",
    "SearchPackagesTool",
    "default_tools",
    "build_registry",
]
