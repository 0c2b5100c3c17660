"""
Formatting functions for reports.

Converts numeric analysis results into readable strings.
"""

import numpy as np

from ..core.fft import SpectralPeak


def format_time(seconds: float, show_ms: bool = True) -> str:
    """
    Format time as minutes:seconds.

    Args:
        seconds: Time in seconds (may be negative for pulse lookbacks)
        show_ms: Show milliseconds

    Returns:
        Formatted string (e.g. "1:23.456" or "-0:01")
    """
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)

    minutes = int(seconds // 60)
    secs = seconds % 60

    if show_ms:
        return f"{sign}{minutes}:{secs:06.3f}"
    else:
        return f"{sign}{minutes}:{int(secs):02d}"


def format_frequency(hz: float) -> str:
    """Format frequency (e.g. "1.5 kHz" or "250 Hz")."""
    if hz >= 1000:
        return f"{hz/1000:.1f} kHz"
    else:
        return f"{hz:.0f} Hz"


def format_db(db: float, precision: int = 1) -> str:
    """Format a level in dB; -inf is shown as "-∞ dB"."""
    if db == float('-inf'):
        return "-∞ dB"
    return f"{db:.{precision}f} dB"


def samples_to_time_str(
    samples: int,
    sample_rate: int,
    show_samples: bool = True,
) -> str:
    """
    Convert a sample index to a time string.

    Returns:
        Formatted string (e.g. "0:01.000 (44,100 samples)")
    """
    time_str = format_time(samples / sample_rate)

    if show_samples:
        return f"{time_str} ({samples:,} samples)"
    return time_str


def format_peak(peak: SpectralPeak) -> str:
    """One characteristic frequency, magnitude shown in dB."""
    level = 20 * np.log10(peak.magnitude) if peak.magnitude > 0 else float('-inf')
    return f"{format_frequency(peak.frequency_hz)}: {format_db(level)}"
