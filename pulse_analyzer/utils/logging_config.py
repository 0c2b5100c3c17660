"""
Logging setup for command-line use.

Library modules only call logging.getLogger(__name__); nothing is
configured until configure_logging() is called.

Usage:
    from pulse_analyzer.utils.logging_config import configure_logging

    configure_logging(level="DEBUG")
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional


ROOT_LOGGER_NAME = "pulse_analyzer"


class ConsoleFormatter(logging.Formatter):
    """Human-readable single-line format."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        name = record.name.replace(f"{ROOT_LOGGER_NAME}.", "")
        base = f"[{ts}] {record.levelname:8} [{name}] {record.getMessage()}"
        if record.exc_info:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger.

    Args:
        level: Log level name. Defaults to PULSE_ANALYZER_LOG_LEVEL or INFO.

    Returns:
        The package root logger

    Calling it again replaces the handler instead of adding a second one.
    """
    if level is None:
        level = os.environ.get("PULSE_ANALYZER_LOG_LEVEL", "INFO")

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(ConsoleFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    return logger
