"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Events are routed through stdlib logging; the ``stockroom`` command
attaches a stderr handler so batch runs keep stdout free for output.
Library use leaves handler setup to the host application.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from core.constants import DEFAULT_LOG_LEVEL
from core.errors import StockroomConfigError

_HANDLER_NAME = "stockroom-stderr"


def configure_logging(level_name: str = DEFAULT_LOG_LEVEL) -> None:
    """Configure structlog and attach the stderr handler.

    Safe to call repeatedly; later calls only adjust the level.

    Args:
        level_name: Standard logging level name, e.g. ``INFO``.

    Raises:
        StockroomConfigError: If the level name is unknown.
    """
    level = _resolve_level(level_name)
    root = logging.getLogger()
    handler = _find_handler(root)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    handler.setLevel(level)
    root.setLevel(level)
    _configure_structlog()


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger accepting keyword event fields.
    """
    if not structlog.is_configured():
        _configure_structlog()
    return structlog.get_logger(name)


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        cache_logger_on_first_use=True,
    )


def _resolve_level(level_name: str) -> int:
    level = logging.getLevelName(level_name.strip().upper())
    if not isinstance(level, int):
        raise StockroomConfigError(
            f"Invalid log level '{level_name}'. "
            "Use one of DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )
    return level


def _find_handler(root: logging.Logger) -> logging.Handler | None:
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler
    return None
