"""
Spectral Comparison

Compares the aggregated magnitude spectrum of a capture against a
baseline capture and extracts the frequencies where the capture is
louder.

Technical assumptions:
- Both signals must share sample rate AND length; nothing is
  resampled or trimmed to make them fit
- The difference is floored at 0 (capture minus baseline), so
  compare(A, B) and compare(B, A) generally differ
- The real-FFT variant is used unless another one is requested
"""

from pathlib import Path

import numpy as np

from .audio_io import load_audio
from .exceptions import DimensionMismatchError
from .fft import FFTVariant, SpectralPeak, find_peaks
from .signal_data import SignalData


def _aggregated_magnitude(
    data: SignalData,
    interval_hz: float,
    variant: FFTVariant,
) -> tuple[np.ndarray, np.ndarray]:
    if variant is FFTVariant.REAL:
        engine = data.rfft
        magnitude = data.real_magnitude
    else:
        engine = data.fft
        magnitude = data.magnitude
    return engine.aggregate_by_bin_interval(magnitude, interval_hz)


def compare(
    target: SignalData,
    baseline: SignalData,
    interval_hz: float,
    variant: FFTVariant = FFTVariant.REAL,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Floored magnitude difference between two signals.

    Args:
        target: Capture under test
        baseline: Reference capture
        interval_hz: Aggregation bin width in Hz
        variant: Fourier variant used for both spectra

    Returns:
        Tuple of (bin frequencies, max(0, target - baseline) per bin)

    Raises:
        DimensionMismatchError: Sample rates or lengths differ
    """
    if target.sample_rate != baseline.sample_rate:
        raise DimensionMismatchError(
            f"Sample rates do not match: {target.sample_rate} vs {baseline.sample_rate}"
        )
    if target.number_of_samples != baseline.number_of_samples:
        raise DimensionMismatchError(
            f"Signal lengths do not match: {target.number_of_samples} vs {baseline.number_of_samples}"
        )

    frequencies, target_magnitude = _aggregated_magnitude(target, interval_hz, variant)
    _, baseline_magnitude = _aggregated_magnitude(baseline, interval_hz, variant)

    return frequencies, np.maximum(0.0, target_magnitude - baseline_magnitude)


def characteristic_frequencies(
    frequencies: np.ndarray,
    magnitude_differences: np.ndarray,
    count: int,
    min_frequency: float = 0.0,
    max_frequency: float = np.inf,
) -> list[SpectralPeak]:
    """Strongest differences, same rules as find_peaks()."""
    return find_peaks(frequencies, magnitude_differences, count, min_frequency, max_frequency)


class SignalAnalyzer:
    """
    Compares one capture against baselines.
    """
    def __init__(self, data: SignalData, variant: FFTVariant = FFTVariant.REAL):
        self.data = data
        self.variant = variant

    @classmethod
    def from_file(cls, file_path: str | Path, variant: FFTVariant = FFTVariant.REAL) -> "SignalAnalyzer":
        return cls(SignalData.from_audio(load_audio(file_path)), variant)

    def compare_with_baseline(
        self,
        baseline: SignalData,
        interval_hz: float,
    ) -> tuple[np.ndarray, np.ndarray]:
        return compare(self.data, baseline, interval_hz, self.variant)

    def extract_characteristic_frequencies(
        self,
        frequencies: np.ndarray,
        magnitude_differences: np.ndarray,
        count: int,
        min_frequency: float = 0.0,
        max_frequency: float = np.inf,
    ) -> list[SpectralPeak]:
        return characteristic_frequencies(
            frequencies, magnitude_differences, count, min_frequency, max_frequency
        )

    def compare_characteristic_frequencies(
        self,
        baseline: SignalData,
        interval_hz: float,
        count: int,
        min_frequency: float = 0.0,
        max_frequency: float = np.inf,
    ) -> list[SpectralPeak]:
        """
        Frequencies where this capture exceeds the baseline the most.

        Returns:
            Up to `count` peaks, strongest first
        """
        frequencies, differences = self.compare_with_baseline(baseline, interval_hz)
        return self.extract_characteristic_frequencies(
            frequencies, differences, count, min_frequency, max_frequency
        )
