"""Logging configuration for the shortener."""

import logging
import sys

LOGGER_NAME = "shorturl"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the package logger with a single stdout handler.

    Module loggers (``logging.getLogger(__name__)``) live under the
    ``shorturl`` namespace and propagate here.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured package logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    # Calling twice (e.g. one app per test) must not duplicate output
    logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
