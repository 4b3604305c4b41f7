"""Logging configuration helpers (structlog)."""

from __future__ import annotations

import logging
import os
import sys

import structlog

LOG_LEVEL_ENV = "LIQUIDITY_DESK_LOG_LEVEL"
LOG_FORMAT_ENV = "LIQUIDITY_DESK_LOG_FORMAT"


def configure_structlog() -> None:
    """
    Configure structlog for the desk.

    Default behavior:
    - Logs go to stderr (keeps stdout clean for CLI output and `--json`).
    - Default level is WARNING (override with `LIQUIDITY_DESK_LOG_LEVEL`).
    - Console rendering by default; `LIQUIDITY_DESK_LOG_FORMAT=json` emits one JSON object
      per line for log shippers.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelNamesMapping().get(level_name)
    if level is None:
        print(
            f"Invalid {LOG_LEVEL_ENV}={level_name!r}; falling back to WARNING",
            file=sys.stderr,
        )
        level = logging.WARNING

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if os.getenv(LOG_FORMAT_ENV, "").lower() == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.__stderr__),
        cache_logger_on_first_use=True,
    )
