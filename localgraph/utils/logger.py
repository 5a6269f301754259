"""Structured logging setup using structlog."""

import logging
import sys
from typing import Optional

import structlog

from localgraph.config import settings


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure structlog processors and the stdlib root handler.

    Called by the application (or ``DIContainer``); importing the package
    leaves the host's logging configuration alone.

    Args:
        level: Log level name, defaults to ``settings.log_level``.
        json_output: Render JSON lines instead of console output,
            defaults to ``settings.log_json``.
    """
    level_name = (level or settings.log_level).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    use_json = settings.log_json if json_output is None else json_output

    logging.basicConfig(level=log_level, stream=sys.stderr, format="%(message)s")

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Get a bound logger for a module.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        Structlog bound logger using whatever configuration is active.
    """
    return structlog.get_logger(name)
