"""Logging configuration for resume-ats."""

import logging
import sys
from typing import TextIO

# Logger name for the package
LOGGER_NAME = "resume_ats"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are noisy at INFO (LiteLLM logs every request).
QUIET_LOGGERS = ("LiteLLM", "litellm", "httpx")

_configured = False


def configure_logging(
    level: str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to INFO.
        format_string: Format string for log records.
        date_format: Format string for timestamps.
        stream: Output stream for the console handler (defaults to stderr).

    Returns:
        The configured ``resume_ats`` logger.
    """
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(log_level)

    if _configured:
        for handler in logger.handlers:
            handler.setLevel(log_level)
        return logger

    logger.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
    logger.addHandler(handler)
    logger.propagate = False

    # Keep provider chatter out of analysis output unless debugging.
    third_party_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    _configured = True
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child logger named ``resume_ats.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Reset logging configuration (useful for testing)."""
    global _configured

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    _configured = False
