"""
Centralized logging configuration for the SMK collection loader.

This module provides standardized logging configuration using structlog
for all components. Fetcher, cache, consent and scheduling code all log
through loggers obtained here so that output is structured consistently.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                       structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_fetch_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the fetch subsystem (page requests, retries, cancellation)."""
    return get_logger(name).bind(subsystem="fetch")


def get_cache_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the cache subsystem (store reads/writes, consent decisions)."""
    return get_logger(name).bind(subsystem="cache")


def log_page_fetched(
    logger: FilteringBoundLogger,
    offset: int,
    received: int,
    accepted: int,
    total: int,
    attempt: int = 1
) -> None:
    """
    Log a successfully fetched page with standardized fields.

    Args:
        logger: Structlog logger instance
        offset: Offset the page was requested at
        received: Raw items in the page envelope
        accepted: Records kept after normalization
        total: Dataset size after appending the page
        attempt: Attempt number that succeeded (1 = first try)
    """
    logger.info(
        "Page fetched",
        offset=offset,
        received=received,
        accepted=accepted,
        total=total,
        attempt=attempt
    )


def log_fetch_transition(
    logger: FilteringBoundLogger,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a fetcher state transition with standardized format.

    Args:
        logger: Structlog logger instance
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        from_state=from_state,
        to_state=to_state,
        trigger=trigger
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.debug("Fetch state transition")
