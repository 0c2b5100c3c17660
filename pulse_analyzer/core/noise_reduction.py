"""
Noise Reduction

Builds a noise-only signal by cutting pulses and noise drops out of a
capture, then removes that noise from the capture with frame-wise
spectral subtraction (see STFTEngine.reduce_noise).
"""

from typing import Iterable

import numpy as np

from .exceptions import InvalidConfigurationError
from .fft import DEFAULT_NOISE_THRESHOLD
from .stft import STFTEngine


def isolate_noise(
    data: np.ndarray,
    pulse_starts: Iterable[int],
    pulse_width: int,
    noise_drop_indices: Iterable[int],
    window_size: int,
) -> np.ndarray:
    """
    Concatenate all samples outside pulses and noise drops.

    Collection is suspended for `pulse_width` samples from every pulse
    start and for `window_size` samples from every noise drop. Starts
    before sample 0 are never reached by the scan and suspend nothing;
    ranges that run past the end are clipped.

    Args:
        data: Time-domain signal
        pulse_starts: Pulse start sample indices
        pulse_width: Pulse length in samples
        noise_drop_indices: Noise-drop sample indices
        window_size: Length of a noise drop in samples

    Returns:
        Noise-only signal (possibly shorter than the input, possibly empty)
    """
    data = np.asarray(data, dtype=np.float64)
    keep = np.ones(len(data), dtype=bool)

    for start in pulse_starts:
        if start < 0:
            continue
        keep[int(start):int(start) + pulse_width] = False

    for start in noise_drop_indices:
        if start < 0:
            continue
        keep[int(start):int(start) + window_size] = False

    return data[keep]


def reduce_noise(
    stft: STFTEngine,
    noise_signal: np.ndarray,
    interval_hz: float = 0.0,
    threshold: float = DEFAULT_NOISE_THRESHOLD,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Subtract a noise profile from the signal bound to `stft`.

    Returns:
        Tuple of (cleaned signal, cleaned spectrum, cleaned magnitude spectrum)

    Raises:
        InvalidConfigurationError: The noise signal is empty
    """
    if len(noise_signal) == 0:
        raise InvalidConfigurationError(
            "Noise profile is empty - pulses and noise drops cover the whole signal"
        )
    return stft.reduce_noise(noise_signal, interval_hz, threshold)
