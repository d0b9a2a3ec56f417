"""Core tool abstractions: BaseTool, ToolMetadata and parameter/output bases.

A tool declares a pydantic parameter schema and implements `_async_run`,
which returns a projection of registry data. `BaseTool` owns argument
validation (raising the taxonomy in `errors`) and JSON rendering.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import InvalidArguments, MissingArguments
from .logging import BoundLogger, get_logger
from .resources import RegistryEndpoints

if TYPE_CHECKING:
    from .gateway import FetchGateway


class ToolMetadata(BaseModel):
    """Metadata describing a tool for discovery by protocol clients.

    Attributes:
        name: Unique identifier (snake_case, e.g., "get_package_info")
        description: What the tool does (shown to the model for selection)
        category: Grouping category
        enabled: Whether tool is currently listed and callable
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="registry")
    enabled: bool = Field(default=True)


class ToolParams(BaseModel):
    """Base for tool arguments: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class ToolOutput(BaseModel):
    """Base for tool results: camelCase keys, absent fields omitted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        return render_json(self.model_dump(mode="json", by_alias=True, exclude_none=True))


def render_json(data: object) -> str:
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode()


TParams = TypeVar("TParams", bound=BaseModel)


class BaseTool(ABC, Generic[TParams]):
    """Abstract base class for registry tools.

    Subclasses must:
    - Define `metadata` class variable with ToolMetadata
    - Define `params_schema` class variable with the parameter model
    - Implement `_async_run(params)` returning a `ToolOutput`

    Example:
        >>> class VersionParams(ToolParams):
        ...     package_name: str
        ...
        >>> class LatestVersionTool(BaseTool[VersionParams]):
        ...     metadata = ToolMetadata(name="latest_version", description="Latest version of a package")
        ...     params_schema = VersionParams
        ...
        ...     async def _async_run(self, params: VersionParams) -> ToolOutput:
        ...         ...
    """

    metadata: ClassVar[ToolMetadata]
    params_schema: ClassVar[type[BaseModel]]

    __slots__ = ("_gateway", "_endpoints", "_log")

    def __init__(
        self,
        gateway: FetchGateway,
        endpoints: RegistryEndpoints | None = None,
        *,
        log: BoundLogger | None = None,
    ) -> None:
        self._gateway = gateway
        self._endpoints = endpoints or RegistryEndpoints()
        self._log = (log or get_logger("pubdev_mcp.tools")).bind(tool=self.metadata.name)

    @property
    def gateway(self) -> FetchGateway:
        return self._gateway

    @property
    def endpoints(self) -> RegistryEndpoints:
        return self._endpoints

    @classmethod
    def input_schema(cls) -> dict[str, object]:
        """JSON schema of the call arguments, as advertised to clients."""
        schema = cls.params_schema.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.setdefault("required", [])
        return schema

    def validate(self, arguments: Mapping[str, object] | None) -> TParams:
        """Validate a raw argument map.

        Raises:
            MissingArguments: No arguments at all, or required ones absent
            InvalidArguments: Arguments present but of the wrong shape
        """
        if arguments is None:
            raise MissingArguments()
        try:
            return self.params_schema.model_validate(dict(arguments))  # type: ignore[return-value]
        except ValidationError as e:
            errors = e.errors()
            missing = tuple(str(err["loc"][0]) for err in errors if err["type"] == "missing" and err["loc"])
            if missing:
                raise MissingArguments(missing) from e
            detail = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in errors)
            raise InvalidArguments(f"Invalid arguments for {self.metadata.name}: {detail}") from e

    @abstractmethod
    async def _async_run(self, params: TParams) -> ToolOutput:
        """Fetch, compare and project; errors propagate as exceptions."""
        ...

    async def arun(self, params: TParams) -> str:
        """Run with validated params and render the result as JSON text."""
        output = await self._async_run(params)
        return output.to_json()

    async def acall(self, **arguments: object) -> str:
        """Validate raw keyword arguments and run."""
        return await self.arun(self.validate(arguments))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.metadata.name}>"
