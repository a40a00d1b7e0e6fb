"""
Logging Configuration Module

Named loggers for the jsonfixtures package. Handlers write to stderr so that
log lines never mix with captured test output on stdout.

The level is taken from JSONFIXTURES_LOG_LEVEL, then LOG_LEVEL, and defaults
to WARNING: the codec only logs construction details (DEBUG) and lenient
decode fallbacks (WARNING).

Example:
    >>> from jsonfixtures.logger import get_logger
    >>> logger = get_logger('jsonfixtures.maps')
    >>> logger.warning('Unrecognised map shape')
    2026-10-19 10:12:00 [WARNING] jsonfixtures.maps: Unrecognised map shape
"""

import logging
import os
import sys

DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configured_level() -> int:
    level = os.getenv("JSONFIXTURES_LOG_LEVEL") or os.getenv("LOG_LEVEL") or DEFAULT_LEVEL
    return getattr(logging, level.upper(), logging.WARNING)


def _stderr_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger with the package's standard handler and format.

    The handler is attached only once per logger name, so modules can call
    this at import time and tests can call it again without duplicating
    output.

    Args:
        name (str): Logger name, normally the dotted module path.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.addHandler(_stderr_handler())
    logger.setLevel(_configured_level())
    logger.propagate = False
    return logger
