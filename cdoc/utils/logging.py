"""Logging setup for cdoc.

Provides a centralized logging configuration with console and optional
file handlers. Log level and format are driven by config.yaml; the
console handler writes to stderr so that it never mixes with progress
output on stdout.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "cdoc"


def setup_logging(
    level: str = "WARNING",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    log_file: Optional[str] = None,
    console_level: Optional[str] = None,
) -> logging.Logger:
    """Configure the package logger with console and optional file output.

    Clears any existing handlers to prevent duplicate log entries across
    calls.

    Args:
        level: Logging level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format string for log messages.
        log_file: Optional file path for log output. If None, logs only
            to the console.
        console_level: Optional stricter level for the console handler,
            used by quiet mode. Defaults to ``level``.

    Returns:
        The configured package logger.
    """
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers.clear()

    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    package_logger.setLevel(numeric_level)

    formatter = logging.Formatter(log_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_numeric = numeric_level
    if console_level:
        console_numeric = max(
            numeric_level, getattr(logging, console_level.upper(), numeric_level)
        )
    console_handler.setLevel(console_numeric)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)

    package_logger.debug("Logging initialized at level %s", level)
    return package_logger
