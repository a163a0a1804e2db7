"""
Logging Configuration

Centralized logging configuration for the TLE service.
All modules should use this logger for consistent, structured output.

Usage:
    from tle_service.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("batch_parsed", records=12)
    logger.warning("recovery_aborted", attempts=10)
    logger.debug("state_transition", from_state="INITIAL", to_state="DETECTING_FORMAT")
"""

import logging
import sys
from typing import Optional

import structlog

from tle_service.config import config

# Default logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: int = logging.WARNING, log_file: Optional[str] = None,
                      json_output: bool = False) -> None:
    """
    Configure logging for the entire application.

    Parameters
    ----------
    level : int
        Logging level (e.g., logging.DEBUG, logging.INFO)
    log_file : str, optional
        Path to log file. If None, logs only to console.
    json_output : bool
        Render structured events as JSON instead of key=value text.
    """
    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Parameters
    ----------
    name : str
        Name of the logger (typically __name__)

    Returns
    -------
    structlog.stdlib.BoundLogger
        Structured logger bound to the stdlib logger of the same name
    """
    return structlog.get_logger(name)


# Configure default logging on module import
configure_logging(
    level=logging.getLevelName(config.LOG_LEVEL)
    if isinstance(logging.getLevelName(config.LOG_LEVEL), int)
    else logging.WARNING,
    json_output=config.LOG_FORMAT == "json",
)
