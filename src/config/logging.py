"""
Logging Configuration for the Admin Reporting Service

structlog events and stdlib records (uvicorn, pymongo) share one processor
chain and one stdout handler, rendered as JSON lines or as console text.
"""

import logging
import sys
from typing import Dict, List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import ProcessorFormatter, add_log_level
from structlog.types import EventDict, Processor

from src.config.settings import Settings, get_settings

# Third-party loggers routed through our handler, with a floor on their level
THIRD_PARTY_LEVELS: Dict[str, int] = {
    "uvicorn": logging.NOTSET,
    "uvicorn.error": logging.NOTSET,
    "uvicorn.access": logging.NOTSET,
    "pymongo": logging.WARNING,
}


def _service_context(settings: Settings) -> Processor:
    """Stamp every event with the service name and environment"""

    def add_service_context(logger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", settings.app_name)
        event_dict.setdefault("environment", settings.app_env)
        return event_dict

    return add_service_context


def build_processors(settings: Settings) -> List[Processor]:
    """Processors applied to structlog events and foreign stdlib records alike"""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        _service_context(settings),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def select_renderer(log_format: str) -> Processor:
    """JSON lines for "json", colored console output otherwise"""
    if log_format.lower() == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    settings = get_settings()
    level_name = (log_level or settings.monitoring.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    processors = build_processors(settings)
    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(
        processor=select_renderer(settings.monitoring.log_format),
        foreign_pre_chain=processors,
    ))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name, floor in THIRD_PARTY_LEVELS.items():
        third_party = logging.getLogger(name)
        third_party.handlers = [handler]
        third_party.propagate = False
        third_party.setLevel(max(level, floor))

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level_name,
        format=settings.monitoring.log_format,
    )


def get_logger(name: str):
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)
