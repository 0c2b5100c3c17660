"""
Utility module for Pulse Analyzer.

Contains helpers used by the command-line entry point.
"""

from .formatting import (
    format_time,
    format_frequency,
    format_db,
    format_peak,
    samples_to_time_str,
)
from .logging_config import configure_logging

__all__ = [
    "format_time",
    "format_frequency",
    "format_db",
    "format_peak",
    "samples_to_time_str",
    "configure_logging",
]
