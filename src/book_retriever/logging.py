"""Structlog-based logging for book-retriever.

The source pool reports its progress as ``pool.*`` events (query done,
source skipped, source failed, unconfigured adapters left out). Events
are written to stderr so that the CLI's table or ``--json`` output on
stdout can be piped. Importing the package configures a quiet default
(warnings and up); the CLI reconfigures from ``--log-level``.
"""
from __future__ import annotations

from typing import Literal

import logging
import sys

import structlog

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # resolved per logger so a redirected stderr is honored
    return structlog.PrintLogger(sys.stderr)


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    if not isinstance(number, int):
        raise ValueError(f"unknown log level: {level!r}")
    return number


def configure_logging(level: LogLevel | str = "INFO", json: bool = True) -> None:
    """Route structlog and stdlib logging to stderr at ``level``.

    ``json`` selects machine-readable lines; the CLI uses the console renderer.
    """
    number = _level_number(level)
    logging.basicConfig(format="%(message)s", level=number, stream=sys.stderr)
    logging.getLogger().setLevel(number)
    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(number),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "book_retriever"):
    return structlog.get_logger(name)


configure_logging("WARNING")
