"""structlog configuration shared by the API server and the CLI."""

import logging
import os

import structlog

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: str | None = None) -> int:
    """Configure stdlib logging and structlog with the same level.

    Args:
        level: Level name; defaults to ``$LOGLEVEL`` or INFO.

    Returns:
        The numeric level applied.
    """
    name = (level or os.getenv("LOGLEVEL", "INFO")).upper()
    log_level = _LEVELS.get(name, logging.INFO)
    logging.basicConfig(level=log_level, format="%(message)s")
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
    return log_level
