"""
Error types raised by the analysis core.

All errors derive from ValueError, so callers that already guard
numeric code with ``except ValueError`` keep working.
"""


class SignalError(ValueError):
    """Base class for all analysis errors."""


class DimensionMismatchError(SignalError):
    """Two signals or spectra do not share sample rate or length."""


class UnsupportedFormatError(SignalError):
    """Sample width or file format cannot be decoded."""


class InvalidConfigurationError(SignalError):
    """A parameter combination makes the requested computation undefined."""
