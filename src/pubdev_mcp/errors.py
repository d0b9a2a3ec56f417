"""Failure taxonomy for registry tool calls.

Every failure a tool can report is a `ToolException` subclass carrying an
`ErrorCode` and a recoverable flag. At the protocol boundary it becomes a
`ToolError`, rendered as ``Error: <message>`` inside a normal envelope.
"""

from __future__ import annotations

import traceback
from enum import StrEnum
from typing import ClassVar, Self

import orjson
from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(StrEnum):
    """Machine-readable failure category, logged alongside the message."""
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_PARAMS = "INVALID_PARAMS"
    PARSE_ERROR = "PARSE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNKNOWN = "UNKNOWN"


# First match wins: TimeoutError and ConnectionError are both OSErrors, and
# JSON decode errors are ValueErrors.
_TYPE_CODES: tuple[tuple[type[BaseException], ErrorCode], ...] = (
    (TimeoutError, ErrorCode.TIMEOUT),
    (ConnectionError, ErrorCode.NETWORK_ERROR),
    (orjson.JSONDecodeError, ErrorCode.PARSE_ERROR),
    (UnicodeDecodeError, ErrorCode.PARSE_ERROR),
    (ValueError, ErrorCode.INVALID_PARAMS),
)


def classify_exception(exc: BaseException) -> ErrorCode:
    """Code for an exception raised outside the `ToolException` taxonomy."""
    return next((code for exc_type, code in _TYPE_CODES if isinstance(exc, exc_type)), ErrorCode.UNKNOWN)


# ─────────────────────────────────────────────────────────────────────────────
# Exceptions
# ─────────────────────────────────────────────────────────────────────────────


class ToolException(Exception):
    """Base for every failure a tool invocation can report.

    Carries a machine-readable code and a recoverable flag; the message is
    what ends up in the envelope text.
    """

    default_code: ClassVar[ErrorCode] = ErrorCode.UNKNOWN
    default_recoverable: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        recoverable: bool | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.recoverable = self.default_recoverable if recoverable is None else recoverable


class FetchFailure(ToolException):
    """Outbound registry request failed.

    Covers non-success status codes, network errors and bodies that do not
    parse or validate. `status` is set when the registry answered at all.
    """

    default_code = ErrorCode.EXTERNAL_SERVICE_ERROR
    default_recoverable = True

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: ErrorCode | None = None,
        recoverable: bool | None = None,
    ) -> None:
        super().__init__(message, code=code, recoverable=recoverable)
        self.status = status

    @classmethod
    def from_status(cls, status: int, reason: str = "") -> Self:
        """Build from an HTTP status line, e.g. ``HTTP 404: Not Found``."""
        code = ErrorCode.NOT_FOUND if status == 404 else ErrorCode.EXTERNAL_SERVICE_ERROR
        message = f"HTTP {status}: {reason}" if reason else f"HTTP {status}"
        return cls(message, status=status, code=code, recoverable=status >= 500)


class NotFound(ToolException):
    """A requested version is absent from the registry's version list."""

    default_code = ErrorCode.NOT_FOUND


class UnsupportedDocType(ToolException):
    """Documentation type outside the supported set."""

    default_code = ErrorCode.INVALID_PARAMS

    def __init__(self, doc_type: str) -> None:
        super().__init__(f"Unsupported documentation type: {doc_type}")
        self.doc_type = doc_type


class MissingArguments(ToolException):
    """Required call arguments were not supplied."""

    default_code = ErrorCode.INVALID_PARAMS

    def __init__(self, fields: tuple[str, ...] = ()) -> None:
        if fields:
            message = f"Missing required arguments: {', '.join(fields)}"
        else:
            message = "Arguments are required"
        super().__init__(message)
        self.fields = fields


class InvalidArguments(ToolException):
    """Arguments were supplied but failed validation."""

    default_code = ErrorCode.INVALID_PARAMS


class UnknownTool(ToolException):
    """No tool is registered under the requested name."""

    default_code = ErrorCode.NOT_FOUND

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


# ─────────────────────────────────────────────────────────────────────────────
# Envelope form
# ─────────────────────────────────────────────────────────────────────────────


class ToolError(BaseModel):
    """A failed call as reported back to the client.

    Only `render()` reaches the client; code, recoverable and details are
    for the logs.

    Example:
        >>> ToolError.from_tool_exception("get_package_info", FetchFailure.from_status(404, "Not Found")).render()
        'Error: HTTP 404: Not Found'
    """

    model_config = ConfigDict(frozen=True)

    tool_name: str
    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = False
    details: str | None = Field(default=None, repr=False)

    @classmethod
    def from_tool_exception(cls, tool_name: str, exc: ToolException) -> Self:
        return cls(tool_name=tool_name, message=exc.message, code=exc.code, recoverable=exc.recoverable)

    @classmethod
    def from_exception(cls, tool_name: str, exc: BaseException, *, with_traceback: bool = True) -> Self:
        """Wrap an unexpected exception; call from inside the ``except`` block."""
        return cls(
            tool_name=tool_name,
            message=str(exc) or type(exc).__name__,
            code=classify_exception(exc),
            details=traceback.format_exc() if with_traceback else None,
        )

    def render(self) -> str:
        return f"Error: {self.message}"

    def __str__(self) -> str:
        return self.render()
