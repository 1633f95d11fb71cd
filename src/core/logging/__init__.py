"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides structured logging with JSON formatting for production and
human-readable console output for development.

The logging configuration includes:
- Timestamp formatting
- Log level inclusion and filtering
- JSON/Console output based on environment
- Logger caching
"""

import logging
import sys

import structlog

from src.core.config.settings import settings


def configure_logging(log_level: str = "INFO", json_logs: bool = False):
    """
    Configures the application's logging system.

    This function sets up structlog with:
    1. ISO format timestamps
    2. Log level inclusion
    3. JSON formatting for production (when LOG_JSON=True)
    4. Console formatting for development
    5. Standard library logger factory, filtered at ``log_level``

    Args:
        log_level: Minimum level name, e.g. "INFO".
        json_logs: Render events as JSON instead of the console format.
    """
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level.upper(), force=True)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Create a singleton logger instance for the application
logger = structlog.get_logger(settings.PROJECT_NAME)
