"""Console entry point: ``pubdev-mcp`` / ``python -m pubdev_mcp``."""

from __future__ import annotations

import sys

from .logging import configure_logging, get_logger
from .server import serve_mcp
from .settings import get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.logging.format, settings.logging.level)
    log = get_logger("pubdev_mcp")
    try:
        serve_mcp(settings)
    except KeyboardInterrupt:
        pass
    except Exception:
        log.exception("server failed to start")
        sys.exit(1)


if __name__ == "__main__":
    main()
