"""Centralized logging configuration for docextract.

This module provides consistent logging configuration for the command line
and for applications embedding the extraction processors.

Usage:
    from docextract.logging import configure_logging
    configure_logging()
"""

import logging
import os
import sys
from logging.config import dictConfig


def get_log_level() -> int:
    """Get the log level from environment variable.

    Returns
    -------
    int
        The logging level to use (defaults to INFO if not set or invalid)
    """
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, None)
    # An invalid level name falls back to INFO
    return level if isinstance(level, int) else logging.INFO


def configure_logging(log_level: str | int | None = None) -> dict:
    """Configure logging for docextract.

    Parameters
    ----------
    log_level : str | int | None
        The log level to use, by default the LOG_LEVEL environment variable

    Returns
    -------
    dict
        The dictConfig applied
    """
    if log_level is None:
        log_level = get_log_level()
    if isinstance(log_level, int):
        log_level = logging.getLevelName(log_level)
    log_level = str(log_level).upper()

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": (
                    "%(levelname)-8s %(asctime)s %(name)s [%(filename)s:%(lineno)d] - %(message)s"
                ),
                "datefmt": "%H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": log_level,
                "formatter": "standard",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            "": {  # Root logger
                "handlers": ["console"],
                "level": log_level,
                "propagate": True,
            },
            "docextract": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
            "PyPDF2": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
            "PIL": {
                "handlers": ["console"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }

    dictConfig(logging_config)

    logging.getLogger(__name__).info("Logging configured with level: %s", log_level)

    return logging_config
