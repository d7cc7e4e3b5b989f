"""
Logging Configuration for the Merchant Analytics API

structlog events and stdlib records (uvicorn, SQLAlchemy) share one stdout
handler and one renderer. Request ids bound by the request middleware are
merged from contextvars into every event.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from merchant_analytics.config.settings import get_settings

SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _service_fields(app_name: str, version: str):
    def add_service(logger, method_name, event_dict):
        event_dict.setdefault("service", app_name)
        event_dict.setdefault("version", version)
        return event_dict
    return add_service


def _shared_processors(app_name: str, version: str) -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        _service_fields(app_name, version),
        structlog.processors.format_exc_info,
    ]


def _stdout_handler(formatter: logging.Formatter, level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    settings = get_settings()
    level = log_level or settings.monitoring.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors = _shared_processors(settings.app_name, settings.version)
    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.monitoring.log_format == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    handler = _stdout_handler(
        ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors),
        numeric_level,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for logger_name in SERVER_LOGGERS:
        server_logger = logging.getLogger(logger_name)
        server_logger.handlers = [handler]
        server_logger.setLevel(numeric_level)
        server_logger.propagate = False

    # SQL statements only when POSTGRES_ECHO is on
    if not settings.database.echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
        environment=settings.app_env,
        timezone=settings.analytics.timezone,
    )
