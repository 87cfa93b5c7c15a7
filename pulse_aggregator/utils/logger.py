"""
PULSE AGGREGATOR — Structured Logging Utility
structlog configuration shared by the engine, the feeds and the API.
Every logger carries a `component` key so JSON lines can be filtered per
subsystem (aggregator, state_store, indicator_registry, api, ...).
"""
import structlog
import logging
import sys
from datetime import datetime
from enum import Enum
from typing import Optional

from pulse_aggregator.config.settings import get_settings


def _plain_values(_, __, event_dict: dict) -> dict:
    """Render enums and datetimes found in log context as plain JSON values."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, datetime):
            event_dict[key] = value.isoformat()
    return event_dict


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Configure structured logging for the whole process.
    Defaults come from AppSettings: JSON lines unless `debug` is set.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_output is None:
        json_output = not settings.debug

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _plain_values,
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn and asyncio still log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger bound to a component name."""
    return structlog.get_logger(component=name or "pulse_aggregator")
