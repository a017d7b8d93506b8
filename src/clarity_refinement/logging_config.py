"""Structured logging for the refinement core.

Host processes call ``configure_logging`` once at start-up. Production
renders one JSON object per line; anything else gets the coloured console
renderer.

Components never talk to a global log stream directly: each one accepts a
``LoggerPort`` at construction and falls back to ``get_logger(__name__)``.
"""

import logging
import sys
from typing import IO, Any, Optional, Protocol

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from clarity_refinement.config import Settings

APP_CONTEXT = "clarity-refinement"

# Chatty at INFO during pool setup and retries
QUIET_LIBRARIES = ("redis", "asyncio")


class LoggerPort(Protocol):
    """Minimal logger surface used by the refinement core."""

    def info(self, event: str, **kw: Any) -> Any: ...

    def warning(self, event: str, **kw: Any) -> Any: ...

    def error(self, event: str, **kw: Any) -> Any: ...


def get_logger(name: str) -> LoggerPort:
    """Return a structlog logger bound to ``name``."""
    return structlog.get_logger(name)


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag every event with the application name."""
    event_dict["app"] = APP_CONTEXT
    return event_dict


def _shared_processors(production: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        add_app_context,
    ]
    if production:
        processors.append(structlog.processors.format_exc_info)
    return processors


def configure_logging(
    settings: Optional[Settings] = None, stream: Optional[IO[str]] = None
) -> None:
    """
    Route structlog and stdlib logging through a single handler.

    Args:
        settings: Source of ``LOG_LEVEL`` and ``ENVIRONMENT`` (defaults to
            a fresh ``Settings()``)
        stream: Output stream (defaults to stdout)
    """
    settings = settings or Settings()
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    production = settings.ENVIRONMENT.lower() == "production"

    shared = _shared_processors(production)
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if production
        else structlog.dev.ConsoleRenderer(colors=stream is None)
    )

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)
    )
    handler.setLevel(level)

    root_logger = logging.getLogger()
    # Replace rather than append so repeated calls stay idempotent
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(level),
        environment=settings.ENVIRONMENT,
        renderer="json" if production else "console",
    )
