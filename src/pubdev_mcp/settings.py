"""Server configuration from ``PUBDEV_MCP_*`` environment variables.

Sections (`http`, `logging`, `docs`) read their own prefixes; a `.env` file in
the working directory is honoured too.

Example:
    >>> from pubdev_mcp.settings import get_settings
    >>> settings = get_settings()
    >>> settings.http.base_url
    'https://pub.dev'

    # PUBDEV_MCP_HTTP_TIMEOUT=10 -> settings.http.timeout == 10.0
    # PUBDEV_MCP_LOG_LEVEL=debug -> settings.logging.level == "DEBUG"

The cache freshness window is not configurable; see
``pubdev_mcp.cache.FRESHNESS_WINDOW``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpSettings(BaseSettings):
    """Outbound HTTP client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PUBDEV_MCP_HTTP_",
        extra="ignore",
    )

    base_url: str = Field(default="https://pub.dev", description="Registry root URL")
    timeout: PositiveFloat = Field(default=30.0, description="Request timeout in seconds")
    user_agent: str = "MCP-PubDev-Server/1.0.0"
    follow_redirects: bool = True

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class LoggingSettings(BaseSettings):
    """Renderer and threshold for `pubdev_mcp.logging`."""

    model_config = SettingsConfigDict(
        env_prefix="PUBDEV_MCP_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class DocsSettings(BaseSettings):
    """Documentation page retrieval."""

    model_config = SettingsConfigDict(
        env_prefix="PUBDEV_MCP_DOCS_",
        extra="ignore",
    )

    max_chars: PositiveInt = Field(default=5000, description="Truncate page content to this length")


class PubDevSettings(BaseSettings):
    """Root settings for the pub.dev MCP server.

    Loads configuration from environment variables with PUBDEV_MCP_ prefix.

    Example environment variables:
        PUBDEV_MCP_TRANSPORT=sse
        PUBDEV_MCP_PORT=9000
        PUBDEV_MCP_HTTP_BASE_URL=https://pub.example.internal
        PUBDEV_MCP_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="PUBDEV_MCP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    server_name: str = "pubdev-mcp-server"
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    host: str = "127.0.0.1"
    port: PositiveInt = 8080

    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    docs: DocsSettings = Field(default_factory=DocsSettings)


@lru_cache(maxsize=1)
def get_settings() -> PubDevSettings:
    """Get the global settings instance (cached)."""
    return PubDevSettings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next `get_settings()` re-reads the environment."""
    get_settings.cache_clear()
