"""Structured logging for tokenforge.

Modules obtain loggers through :func:`get_logger`, which never touches the
global structlog configuration. Events follow whatever pipeline the host
application installs; applications that want tokenforge's pipeline call
:func:`configure_logging` once at startup.

Token contents, secrets, and key material are never passed to a logger.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

LIBRARY_NAME = "tokenforge"


def add_library_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Tag every event with the emitting library."""
    event_dict.setdefault("library", LIBRARY_NAME)
    return event_dict


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_library_context,
    ]


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Install a rendering pipeline for applications embedding tokenforge."""
    renderer: Any
    if fmt.lower() == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[*_shared_processors(), renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a lazily bound structured logger instance."""
    return structlog.stdlib.get_logger(name)
