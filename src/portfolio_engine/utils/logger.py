"""
Logging Configuration

structlog setup for the discovery engine. Every event carries the service
name and environment; events logged during a discovery run also carry the
run id bound by bind_run_context(), including those from scraper threads.
"""
import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from config.settings import settings


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add application context to all log entries.
    """
    event_dict["environment"] = settings.environment
    event_dict["service"] = "portfolio_engine"
    return event_dict


def bind_run_context(**values: Any) -> str:
    """
    Start a fresh logging context for one discovery run.

    Replaces whatever was bound before. asyncio.to_thread copies the
    context, so scraper threads log with the same fields.

    Returns:
        The discovery_run id that was bound
    """
    run_id = values.pop("discovery_run", None) or uuid.uuid4().hex[:12]
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(discovery_run=run_id, **values)
    return run_id


def setup_logging() -> structlog.BoundLogger:
    """
    Configure structured logging for the application.

    Returns:
        Configured structlog logger instance
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.processors.ExceptionRenderer())
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def get_logger(name: str = None) -> structlog.BoundLogger:
    """Module logger; name is usually __name__."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
