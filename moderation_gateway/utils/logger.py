"""Structured logging for the moderation gateway.

structlog renders one JSON object per line (console output when
``JSON_LOGS=false``). The request id lives in structlog's own context
variables, so every line emitted while a moderation request is being served
carries ``request_id`` without the call sites passing it around.
"""

import logging
import sys

import structlog
from structlog.types import Processor


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "moderation_gateway") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_id(request_id: str) -> None:
    """Attach ``request_id`` to every log line until clear_request_id()."""
    structlog.contextvars.bind_contextvars(request_id=request_id)


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars("request_id")


# Sensible defaults until main.py reconfigures from the environment
configure_logging()
