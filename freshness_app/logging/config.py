"""
Centralized logging configuration for the freshness library.

This module provides standardized logging configuration using structlog
for all components. Fetch decisions and scheduler activity are logged
through the helpers below so that every event carries the same fields.
"""
import logging
import sys
from typing import TYPE_CHECKING, Any, Optional, TextIO

import structlog
from structlog.types import FilteringBoundLogger

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from ..policy.models import FreshnessDecision


def configure_logging(
    level: str = "INFO",
    format_json: Optional[bool] = None,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None,
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure structlog over stdlib logging for a host process.

    The library itself never calls this; an application embedding the
    policy calls it once at startup.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render JSON lines; defaults to JSON unless the stream is a terminal
        include_timestamp: Add a UTC ISO-8601 timestamp
        include_caller: Add the calling filename and line number
        extra_processors: Additional structlog processors, run before rendering
        stream: Output stream, stderr if omitted

    Raises:
        ConfigurationError: If the level name is unknown
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ConfigurationError(f"Unknown log level: {level}", context={"level": level})

    stream = stream or sys.stderr
    interactive = stream.isatty()
    if format_json is None:
        format_json = not interactive

    logging.basicConfig(level=log_level, stream=stream, format="%(message)s")

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

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
        processors.append(structlog.dev.ConsoleRenderer(colors=interactive))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> FilteringBoundLogger:
    """
    Get a structlog logger, optionally with context bound up front.

    Args:
        name: Logger name (typically __name__)
        initial_values: Key-value pairs carried by every event

    Returns:
        Lazily configured structlog logger
    """
    return structlog.get_logger(name, **initial_values)


def get_policy_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for fetch-eligibility decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the freshness policy subsystem
    """
    return get_logger(name, subsystem="freshness_policy", audit_trail=True)


def get_scheduler_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound with the recurring scheduler subsystem."""
    return get_logger(name, subsystem="scheduler")


def log_fetch_decision(
    logger: FilteringBoundLogger,
    exchange_code: str,
    decision: "FreshnessDecision",
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a fetch-eligibility decision with standardized format.

    Fetch decisions are logged at info, skips at debug since they are
    the common case for a busy dashboard.

    Args:
        logger: Structlog logger instance
        exchange_code: Exchange the decision was made for
        decision: The decision returned by the policy
        context: Additional context data
    """
    next_fetch = decision.next_fetch_time.isoformat() if decision.next_fetch_time else None

    bound_logger = logger.bind(
        exchange_code=exchange_code,
        should_fetch=decision.should_fetch,
        reason=decision.reason.value,
        next_fetch_time=next_fetch,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if decision.should_fetch:
        bound_logger.info("Fetch allowed")
    else:
        bound_logger.debug("Fetch skipped")
