"""Structured logging for scope-auditor.

All modules obtain a logger through get_logger(__name__) and log with
keyword context, e.g.::

    logger.info("Fetched integration log page", page=2, pages=7, records=200)

configure_logging() is called once by each entry point (CLI, FastAPI app).
Log records go to stderr so that JSON written to stdout by the CLI stays
machine-readable.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger, Processor


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    Safe to call more than once; later calls replace the earlier setup so
    that the CLI can raise verbosity after settings are loaded.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...).
        json_logs: Render records as JSON lines instead of console output.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )

    renderer: Processor
    if json_logs:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Return a structlog logger bound to the given module name.

    Args:
        name: Usually the calling module's __name__.

    Returns:
        A bound logger accepting keyword context on every call.
    """
    return structlog.get_logger(name)
