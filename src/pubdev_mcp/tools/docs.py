"""Documentation page retrieval."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import Field

from ..core import BaseTool, ToolMetadata, ToolOutput, ToolParams
from ..errors import FetchFailure, UnsupportedDocType
from ..html import extract_text
from ..resources import DOC_LABELS, DOC_TYPES, RegistryEndpoints

if TYPE_CHECKING:
    from ..gateway import FetchGateway
    from ..logging import BoundLogger

DEFAULT_MAX_CHARS = 5000


class DocumentationParams(ToolParams):
    package_name: str = Field(..., min_length=1, description="Name of the package to get documentation for")
    version: str | None = Field(default=None, description="Specific version (optional, defaults to latest)")
    # Plain string so an unknown type reaches the handler as UnsupportedDocType.
    doc_type: str = Field(
        default="readme",
        description="Type of documentation to retrieve",
        json_schema_extra={"enum": list(DOC_TYPES)},
    )


class DocumentationPage(ToolOutput):
    type: str
    content: str
    last_modified: str | None = None


class DocumentationOutput(ToolOutput):
    package_name: str
    version: str
    documentation_type: str
    documentation: DocumentationPage


class GetDocumentationChangesTool(BaseTool[DocumentationParams]):
    """README, CHANGELOG, example or generated API docs for a package version.

    Pages are fetched uncached. A page the registry does not serve is
    reported in the content, not as an error.
    """

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="get_documentation_changes",
        description="Get documentation content and detect changes for a package",
        category="documentation",
    )
    params_schema: ClassVar[type[DocumentationParams]] = DocumentationParams

    def __init__(
        self,
        gateway: FetchGateway,
        endpoints: RegistryEndpoints | None = None,
        *,
        max_chars: int = DEFAULT_MAX_CHARS,
        log: BoundLogger | None = None,
    ) -> None:
        super().__init__(gateway, endpoints, log=log)
        self.max_chars = max_chars

    async def _async_run(self, params: DocumentationParams) -> DocumentationOutput:
        doc_type = params.doc_type
        if doc_type not in DOC_TYPES:
            raise UnsupportedDocType(doc_type)

        locator = self.endpoints.documentation(params.package_name, doc_type, params.version)
        try:
            response = await self.gateway.fetch_page(locator)
        except FetchFailure as e:
            raise FetchFailure(
                f"Failed to fetch documentation: {e.message}",
                status=e.status,
                code=e.code,
                recoverable=e.recoverable,
            ) from e

        if response.ok:
            content = response.text()
            if doc_type != "api_docs":
                content = extract_text(content)
        else:
            content = f"{DOC_LABELS[doc_type]} not available for this package/version"

        return DocumentationOutput(
            package_name=params.package_name,
            version=params.version or "latest",
            documentation_type=doc_type,
            documentation=DocumentationPage(
                type=doc_type,
                content=content[: self.max_chars],
                last_modified=response.header("last-modified"),
            ),
        )
