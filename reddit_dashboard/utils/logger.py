"""
structlog setup for the dashboard backend.

Events are snake_case names with keyword context, rendered as JSON lines in
production and as colored console lines in development. Components take a
logger in their constructor; ``component_logger`` supplies a module logger
when the caller passes none.
"""
import logging
import sys
from typing import Any, Optional

import structlog


def setup_logging(level: str = "INFO", environment: str = "production") -> None:
    """
    Configure structlog and the stdlib root logger once at process start.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown names mean INFO)
        environment: "development" selects the console renderer; any other
            value renders JSON
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    # uvicorn, sqlalchemy and httpx log through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if environment == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer(default=str))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__, **initial_values: Any) -> structlog.BoundLogger:
    """
    Module logger with optional bound context.

    Example:
        >>> logger = get_logger(__name__, component="reddit_client")
        >>> logger.info("api_request", method="GET", url="https://www.reddit.com/r/python/hot.json")
    """
    return structlog.get_logger(name, **initial_values)


def component_logger(
    logger: Optional[structlog.BoundLogger], name: str
) -> structlog.BoundLogger:
    """Return the injected logger, or a module logger when none was given."""
    return logger if logger is not None else get_logger(name)
