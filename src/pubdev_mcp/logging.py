"""Structured key=value logging for the gateway and the tool server.

Loggers are immutable: ``bind`` returns a copy carrying extra fields. Every
entry goes through one process-wide renderer picked by `configure_logging`.
Output always goes to stderr because the stdio transport owns stdout.

Quick Start:
    >>> from pubdev_mcp.logging import configure_logging, get_logger
    >>> configure_logging("console", "DEBUG")
    >>> log = get_logger("pubdev_mcp.gateway").bind(key="package-http")
    >>> log.debug("cache miss", url="https://pub.dev/api/packages/http")
    # => 10:30:45.123 [debug] cache miss key="package-http" logger="pubdev_mcp.gateway" url="https://..."
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol, TextIO, runtime_checkable

import orjson

Fields = dict[str, object]

# Fields added by `log_context`; copied into each asyncio task on creation.
_scope: ContextVar[Mapping[str, object] | None] = ContextVar("pubdev_mcp_log_scope", default=None)


@dataclass(frozen=True, slots=True)
class LogEntry:
    timestamp: float
    level: str
    event: str
    fields: Fields

    @property
    def iso_time(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).isoformat()

    @property
    def clock_time(self) -> str:
        return datetime.fromtimestamp(self.timestamp, tz=UTC).strftime("%H:%M:%S.%f")[:-3]


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(frozen=True, slots=True)
class BoundLogger:
    """Logger with fields attached to every entry it emits.

    Example:
        >>> log = get_logger("pubdev_mcp.server").bind(tool="search_packages")
        >>> log.warning("tool failed", code="TIMEOUT")
    """

    fields: Fields = field(default_factory=dict)

    def bind(self, **kw: object) -> BoundLogger:
        return BoundLogger({**self.fields, **kw})

    def debug(self, event: str, **kw: object) -> None:
        _emit(logging.DEBUG, event, self.fields, kw)

    def info(self, event: str, **kw: object) -> None:
        _emit(logging.INFO, event, self.fields, kw)

    def warning(self, event: str, **kw: object) -> None:
        _emit(logging.WARNING, event, self.fields, kw)

    def error(self, event: str, **kw: object) -> None:
        _emit(logging.ERROR, event, self.fields, kw)

    def exception(self, event: str, **kw: object) -> None:
        """Log at error level with the traceback of the exception being handled."""
        _emit(logging.ERROR, event, self.fields, {**kw, "exc_info": traceback.format_exc()})


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────

_LEVEL_ANSI = {"debug": "\033[2m", "info": "\033[32m", "warning": "\033[33m", "error": "\033[31m"}
_RESET = "\033[0m"


def _console_value(v: object) -> str:
    if isinstance(v, str):
        return orjson.dumps(v).decode()
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, Mapping | list | tuple):
        return f"<{len(v)} items>"
    return str(v)


@dataclass(slots=True)
class ConsoleRenderer:
    """``HH:MM:SS.mmm [level] event key=value ...``, traceback on following lines."""

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def render(self, entry: LogEntry) -> None:
        tag = f"[{entry.level}]"
        if self.colors:
            tag = f"{_LEVEL_ANSI.get(entry.level, '')}{tag}{_RESET}"
        trace = entry.fields.get("exc_info")
        pairs = " ".join(
            f"{k}={_console_value(v)}" for k, v in sorted(entry.fields.items()) if k != "exc_info"
        )
        line = f"{entry.clock_time} {tag} {entry.event}"
        print(f"{line} {pairs}" if pairs else line, file=self.output)
        if trace:
            print(trace, end="" if str(trace).endswith("\n") else "\n", file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """One JSON object per line."""

    output: TextIO = field(default_factory=lambda: sys.stderr)

    def render(self, entry: LogEntry) -> None:
        record = {"timestamp": entry.iso_time, "level": entry.level, "event": entry.event, **entry.fields}
        self.output.write(orjson.dumps(record, default=str).decode() + "\n")


class NoOpRenderer:
    def render(self, entry: LogEntry) -> None:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────────────────────────────────────

_renderer: LogRenderer | None = None
_threshold: int = logging.INFO


def configure_logging(
    format: str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Select the renderer and minimum level for all loggers.

    Args:
        format: "console", "json" or "none"
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR)
        output: Stream to write to (stderr if omitted)
        colors: Colour the console level tag; auto-detected when None
    """
    global _renderer, _threshold
    stream = output or sys.stderr
    renderer: LogRenderer
    match format:
        case "console":
            renderer = ConsoleRenderer(output=stream, colors=colors)
        case "json":
            renderer = JsonRenderer(output=stream)
        case "none":
            renderer = NoOpRenderer()
        case _:
            raise ValueError(f"Unknown log format {format!r}; expected console, json or none")

    _renderer = renderer
    _threshold = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    return renderer


def get_logger(name: str | None = None, **fields: object) -> BoundLogger:
    """Logger carrying `name` as its ``logger`` field plus any initial fields."""
    if name:
        fields["logger"] = name
    return BoundLogger(fields)


@contextmanager
def log_context(**fields: object) -> Iterator[None]:
    """Attach `fields` to every entry logged inside the block.

    Example:
        >>> with log_context(tool="get_package_info"):
        ...     log.info("tool completed")  # carries tool="get_package_info"
    """
    token = _scope.set({**(_scope.get() or {}), **fields})
    try:
        yield
    finally:
        _scope.reset(token)


def _emit(level: int, event: str, bound: Fields, extra: Fields) -> None:
    if level < _threshold:
        return
    global _renderer
    if _renderer is None:
        _renderer = ConsoleRenderer()
    scoped = _scope.get() or {}
    _renderer.render(LogEntry(
        timestamp=time.time(),
        level=logging.getLevelName(level).lower(),
        event=event,
        fields={**scoped, **bound, **extra},
    ))
