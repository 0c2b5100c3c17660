"""
Elementwise Signal Transforms

Stateless helpers shared by all Fourier engines.
All functions return NEW arrays - inputs are never modified.

Technical assumptions:
- Signals are 1D float64 arrays
- dB conversion is 20*log10 without clamping (0 yields -inf)
- Resizing tiles or truncates, it never interpolates
"""

import numpy as np
from scipy import signal

from .exceptions import InvalidConfigurationError


def compute_amplitude(data: np.ndarray) -> np.ndarray:
    """Absolute value of every time-domain sample."""
    return np.abs(np.asarray(data, dtype=np.float64))


def compute_magnitude(spectrum: np.ndarray) -> np.ndarray:
    """Magnitude of every complex frequency bin."""
    return np.abs(spectrum)


def to_db(values: np.ndarray) -> np.ndarray:
    """
    Convert linear values to dB (20 * log10).

    No floor is applied: 0 yields -inf and negative values yield NaN.
    Callers that need a finite range must clamp beforehand.

    Args:
        values: Linear amplitudes or magnitudes

    Returns:
        Values in dB
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return 20 * np.log10(np.asarray(values, dtype=np.float64))


def resize_signal(data: np.ndarray, length: int) -> np.ndarray:
    """
    Bring a signal to an exact length.

    - Shorter: tiled with whole copies, plus a partial final copy
    - Longer: truncated to the first `length` samples
    - Equal: copied unchanged

    Example:
        resize_signal([1, 2, 3], 7) -> [1, 2, 3, 1, 2, 3, 1]

    Args:
        data: Input signal (1D)
        length: Target length in samples

    Returns:
        Copy of the signal with exactly `length` samples

    Raises:
        InvalidConfigurationError: Negative length, or an empty signal
            that would have to be tiled
    """
    data = np.asarray(data, dtype=np.float64)

    if length < 0:
        raise InvalidConfigurationError(f"Length must not be negative, got: {length}")

    if len(data) >= length:
        return data[:length].copy()

    if len(data) == 0:
        raise InvalidConfigurationError(
            f"Cannot tile an empty signal to {length} samples"
        )

    copies = -(-length // len(data))
    return np.tile(data, copies)[:length]


def compute_time_bins(data: np.ndarray, sample_rate: int) -> np.ndarray:
    """Time axis in seconds, one entry per sample."""
    return np.arange(len(data)) / sample_rate


def hamming_window(size: int) -> np.ndarray:
    """
    Symmetric Hamming window.

    w[i] = 0.54 - 0.46 * cos(2*pi*i / (size - 1))
    """
    if size < 1:
        raise InvalidConfigurationError(f"Window size must be at least 1, got: {size}")
    return signal.windows.hamming(size, sym=True)
