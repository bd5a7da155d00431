"""Structured logging configuration using structlog.

Console output for development, JSON for production. Every event carries
the naming job it ran under: batch jobs bind ``job`` (and ``chunk`` for
bulk refresh chunks) through ``LogContext``, and anything logged outside a
job is tagged ``job="interactive"``. Household and member ids are rendered
as plain strings so JSON output stays greppable.
"""

import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from uuid import UUID

import structlog
from structlog.types import Processor

from household_names.config import Settings, get_settings

INTERACTIVE_JOB = "interactive"


def _add_log_level(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add log level to event dict for JSON output."""
    if method_name == "warn":
        method_name = "warning"
    event_dict["level"] = method_name.upper()
    return event_dict


def _add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add application context to all log events."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["environment"] = settings.environment.value
    return event_dict


def _add_job_default(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Tag events logged outside a batch job."""
    event_dict.setdefault("job", INTERACTIVE_JOB)
    return event_dict


def _stringify_ids(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Render UUIDs, and lists or sets of them, as plain strings."""
    for key, value in event_dict.items():
        if isinstance(value, UUID):
            event_dict[key] = str(value)
        elif isinstance(value, (list, tuple, set, frozenset)) and any(
            isinstance(item, UUID) for item in value
        ):
            event_dict[key] = sorted(str(item) for item in value)
    return event_dict


def get_console_processors() -> list[Processor]:
    """Get processors for console (development) output."""
    return [
        structlog.contextvars.merge_contextvars,
        _add_job_default,
        _stringify_ids,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        ),
    ]


def get_json_processors() -> list[Processor]:
    """Get processors for JSON (production) output."""
    return [
        structlog.contextvars.merge_contextvars,
        _add_job_default,
        _stringify_ids,
        _add_log_level,
        _add_app_context,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structured logging based on settings.

    Args:
        settings: Application settings. If None, loads from environment.

    Call this once at application startup before any logging occurs.
    """
    if settings is None:
        settings = get_settings()

    log_level = getattr(logging, settings.log_level.value)

    if settings.log_format == "json":
        processors = get_json_processors()
    else:
        processors = get_console_processors()

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    if settings.log_file:
        _setup_file_handler(settings.log_file, log_level)


def _setup_file_handler(log_file: Path, level: int) -> None:
    """Set up a file handler for logging."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    logging.getLogger().addHandler(file_handler)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        Configured structlog BoundLogger.

    Example:
        logger = get_logger(__name__)
        logger.info("household_names_updated", household_count=12)
    """
    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> Mapping[str, Any]:
    """Bind context variables for all subsequent log calls in this context.

    Returns the tokens needed to restore the previous values.

    Example:
        bind_context(job="bulk_refresh", chunk=3)
        logger.info("chunk_started")  # Will include job and chunk
    """
    return structlog.contextvars.bind_contextvars(**kwargs)


class LogContext:
    """Context manager for temporary log context binding.

    Values bound by an enclosing ``LogContext`` come back on exit, so a
    naming job started inside a bulk refresh chunk does not clear the
    chunk number.

    Example:
        with LogContext(job="household_naming"):
            logger.info("job_started")
            updater.update_names(ids)
        # Context automatically restored after the with block
    """

    def __init__(self, **kwargs: Any) -> None:
        self.kwargs = kwargs
        self._tokens: Mapping[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = bind_context(**self.kwargs)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
