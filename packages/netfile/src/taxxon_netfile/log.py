"""Logging setup for Taxxon services.

Every module logs through a module-level ``structlog.get_logger()`` with an
event name first and context as keyword arguments:

    logger.info("filing_submitted", filing_id=filing.id, provider="mock")

configure_logging() decides how those events are rendered: JSON lines for
log aggregators in production, a readable console format otherwise.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, render events as JSON objects
        stream: Output stream (default: stderr)
    """
    level = level.upper().strip()
    if level not in VALID_LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {VALID_LEVELS}")

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def bind_filing_context(filing_id: str, user_id: Optional[str] = None) -> None:
    """Attach filing identifiers to every event logged in the current context."""
    structlog.contextvars.bind_contextvars(filing_id=filing_id)
    if user_id:
        structlog.contextvars.bind_contextvars(user_id=user_id)


def clear_filing_context() -> None:
    structlog.contextvars.unbind_contextvars("filing_id", "user_id")
