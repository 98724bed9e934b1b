"""
Logging configuration for the calculation core.

Provides structured logging with optional JSON formatting.
"""

import logging
import sys
from typing import Any, Optional

import structlog

from fpa_core.config import get_settings


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> None:
    """
    Configure logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Whether to output JSON format
    """
    settings = get_settings()

    log_level = level or settings.logging.level
    use_json = json_format if json_format is not None else settings.logging.json_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if use_json:
        renderers = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_request_context(**values: Any) -> None:
    """Bind per-request values (estimate id, project id) to subsequent log events."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def log_calculation(
    operation: str,
    outcome: str,
    duration_ms: float,
    **kwargs: Any,
) -> None:
    """Log a completed calculation request."""
    logger = get_logger("fpa_core.calculation")

    if outcome == "error":
        logger.warning(
            "calculation_completed",
            operation=operation,
            outcome=outcome,
            duration_ms=duration_ms,
            **kwargs,
        )
    else:
        logger.info(
            "calculation_completed",
            operation=operation,
            outcome=outcome,
            duration_ms=duration_ms,
            **kwargs,
        )
