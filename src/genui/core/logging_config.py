"""
Structured Logging Configuration
Every engine log line can carry the surface it concerns.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from .config import get_settings

# Loggers whose records are noise for the engine
QUIET_LOGGERS = ("asyncio", "httpx", "httpcore")


def order_surface_fields(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Move surface_id and path right after the event name."""
    ordered: dict[str, Any] = {"event": event_dict.pop("event", "")}
    for key in ("surface_id", "path"):
        if key in event_dict:
            ordered[key] = event_dict.pop(key)
    ordered.update(event_dict)
    return ordered


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure structured logging for the engine.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); defaults to
            the log_level setting
        json_logs: Use JSON formatter for machine-readable logs; defaults to
            the json_logs setting
    """
    settings = get_settings()
    level = level or settings.log_level
    json_logs = settings.json_logs if json_logs is None else json_logs
    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_logs:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.basicConfig(level=log_level, handlers=[handler], force=True)
    else:
        logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stdout, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            order_surface_fields,
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


@contextmanager
def surface_context(surface_id: str) -> Iterator[None]:
    """Tag every log line emitted in scope with surface_id."""
    with structlog.contextvars.bound_contextvars(surface_id=surface_id):
        yield
