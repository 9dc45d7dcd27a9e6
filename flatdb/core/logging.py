"""Structured logging configuration."""

import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import Processor


def setup_logging(level: str = "WARNING", log_format: str = "console") -> None:
    """
    Set up structured logging with structlog.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format ('json' or 'console')
    """
    numeric_level = getattr(logging, level.upper())

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )

    _configure_structlog(numeric_level, log_format)


def _configure_structlog(numeric_level: int, log_format: str) -> None:
    shared_processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors: List[Processor] = [
            *shared_processors,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    # not cached, so a later setup_logging() call reaches module-level loggers
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None, **initial_context: Any):
    """
    Get a structlog logger, optionally bound to initial context.

    Until the application configures structlog itself, FlatDB installs
    its quiet default: warnings and above, rendered to stderr. Calling
    setup_logging() or structlog.configure() afterwards replaces it.
    """
    if not structlog.is_configured():
        _configure_structlog(logging.WARNING, "console")
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
