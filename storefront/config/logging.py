"""
Store Logging

Routes structlog events through the stdlib root logger. Every event carries
the store's application name, environment and currency so log lines from
several stores in one process can be told apart.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import ProcessorFormatter, add_log_level

from storefront.config.settings import Settings, get_settings

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    add_log_level,
    TimeStamper(fmt="iso"),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def resolve_level(settings: Settings, log_level: Optional[str] = None) -> int:
    """Explicit level first, DEBUG in debug mode, else the configured level"""
    if log_level:
        name = log_level
    elif settings.debug:
        name = "DEBUG"
    else:
        name = settings.monitoring.log_level
    return getattr(logging, name.upper(), logging.INFO)


def build_renderer(settings: Settings):
    """JSON lines for the "json" format, coloured console output otherwise"""
    if settings.monitoring.log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    settings: Optional[Settings] = None,
    log_level: Optional[str] = None,
) -> List[logging.Handler]:
    """
    Configure structured logging for a store process.

    Replaces the root handlers on every call. A file handler is added next to
    stdout when ``monitoring.log_file`` is set.

    Args:
        settings: Application settings (defaults to the cached environment settings)
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        List[logging.Handler]: Handlers attached to the root logger
    """
    settings = settings or get_settings()
    level = resolve_level(settings, log_level)

    structlog.configure(
        processors=SHARED_PROCESSORS + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        app=settings.app_name,
        environment=settings.app_env,
        currency=settings.store.currency,
    )

    formatter = ProcessorFormatter(processor=build_renderer(settings), foreign_pre_chain=SHARED_PROCESSORS)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.monitoring.log_file:
        handlers.append(logging.FileHandler(settings.monitoring.log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=logging.getLevelName(level),
        format=settings.monitoring.log_format,
        log_file=settings.monitoring.log_file,
    )
    return handlers
