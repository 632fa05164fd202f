"""structlog setup for the EstiMate Pro API and CLI.

Level and renderer come from ``AppConfig`` (``LOG_LEVEL``, ``LOG_FORMAT``).
Every event carries the service name, version and environment so lead and
quote events from several deployments can share one log sink.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from estimatepro import __version__
from estimatepro.config import AppConfig, get_config

SERVICE_NAME = "estimatepro"
LOG_FILE = Path("logs/estimatepro.log")

# Chatty libraries kept at WARNING unless we run at DEBUG
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "multipart")


def _service_context(environment: str):
    def add_service_context(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("version", __version__)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service_context


def build_processors(config: AppConfig) -> list[Any]:
    """structlog processor chain ending in the configured renderer."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_context(config.environment),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if config.log_format.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def configure_logging(config: AppConfig | None = None) -> None:
    """Configure structlog and the stdlib root logger."""
    config = config or get_config()
    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=build_processors(config),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if LOG_FILE.parent.exists():
        handlers.append(logging.FileHandler(LOG_FILE))

    logging.basicConfig(format="%(message)s", handlers=handlers, level=level, force=True)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)
