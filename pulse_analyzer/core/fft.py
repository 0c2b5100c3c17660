"""
Fourier Engines

Whole-signal FFT in two variants with a shared interface:

- FULL: complex FFT over all N bins (numpy.fft.fft)
- REAL: half spectrum for real input, N//2 + 1 bins (numpy.fft.rfft)

Both expose forward, inverse, frequency_bins, bins_for_interval,
aggregate_by_bin_interval, find_characteristic_frequencies and
reduce_noise. Use create_engine() to pick a variant explicitly.

Technical assumptions:
- No normalization on forward, 1/N on inverse (numpy convention)
- Bin aggregation averages magnitudes, it never sums them
- Bin width is clamped to at least one native bin
- Spectral subtraction keeps the phase of the signal spectrum
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from .exceptions import DimensionMismatchError, InvalidConfigurationError
from .signal_processing import compute_magnitude, resize_signal


DEFAULT_NOISE_THRESHOLD = 1e-10


class FFTVariant(Enum):
    """Transform variant."""
    FULL = "full"
    REAL = "real"


@dataclass(frozen=True)
class SpectralPeak:
    """A single characteristic frequency."""
    frequency_hz: float
    magnitude: float


# ============================================================
# SHARED BIN ARITHMETIC
# ============================================================

def compute_bin_width(interval_hz: float, resolution_hz: float) -> int:
    """
    Number of native bins that make up one target bin.

    The ratio interval / resolution is rounded half up (2.5 -> 3).
    Intervals narrower than the native resolution (or <= 0) give 1.
    """
    if interval_hz <= 0 or resolution_hz <= 0:
        return 1
    return max(1, int(np.floor(interval_hz / resolution_hz + 0.5)))


def aggregate_magnitude(
    magnitude: np.ndarray,
    resolution_hz: float,
    interval_hz: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Coarsen a magnitude spectrum to bins of roughly `interval_hz`.

    Magnitudes are averaged across each group of native bins. The output
    has floor(native_bins / bin_width) + 1 entries; bin k sits at
    k * bin_width * resolution_hz. A trailing bin without native bins
    behind it (native count divisible by the width) has magnitude 0.

    Args:
        magnitude: Native magnitude spectrum
        resolution_hz: Native frequency resolution
        interval_hz: Target bin width in Hz

    Returns:
        Tuple of (bin frequencies, averaged magnitudes)
    """
    magnitude = np.asarray(magnitude, dtype=np.float64)
    native_bins = len(magnitude)
    bin_width = compute_bin_width(interval_hz, resolution_hz)
    output_bins = native_bins // bin_width + 1

    frequencies = np.arange(output_bins) * bin_width * resolution_hz
    combined = np.zeros(output_bins)

    if native_bins > 0:
        starts = np.arange(0, native_bins, bin_width)
        counts = np.minimum(bin_width, native_bins - starts)
        combined[:len(starts)] = np.add.reduceat(magnitude, starts) / counts

    return frequencies, combined


def aggregate_by_bin_interval(
    magnitude: np.ndarray,
    sample_rate: int,
    num_samples: int,
    interval_hz: float,
) -> tuple[np.ndarray, np.ndarray]:
    """Aggregate a full-spectrum magnitude (resolution sample_rate / N)."""
    if num_samples <= 0:
        raise InvalidConfigurationError(f"Sample count must be positive, got: {num_samples}")
    return aggregate_magnitude(magnitude, sample_rate / num_samples, interval_hz)


def find_peaks(
    frequencies: np.ndarray,
    magnitudes: np.ndarray,
    count: int,
    min_frequency: float = 0.0,
    max_frequency: float = np.inf,
) -> list[SpectralPeak]:
    """
    Extract the `count` strongest bins inside a frequency range.

    The DC bin (0 Hz) is never reported. Equal magnitudes are ordered
    by ascending frequency, so the result is deterministic.

    Args:
        frequencies: Bin frequencies in Hz
        magnitudes: Magnitude per bin
        count: Maximum number of peaks
        min_frequency: Lower bound (inclusive)
        max_frequency: Upper bound (inclusive)

    Returns:
        Peaks sorted by magnitude, strongest first
    """
    frequencies = np.asarray(frequencies, dtype=np.float64)
    magnitudes = np.asarray(magnitudes, dtype=np.float64)

    if frequencies.shape != magnitudes.shape:
        raise DimensionMismatchError(
            f"Bins and magnitudes differ in length: {len(frequencies)} vs {len(magnitudes)}"
        )

    mask = (
        (frequencies != 0)
        & (frequencies >= min_frequency)
        & (frequencies <= max_frequency)
    )
    candidates = np.flatnonzero(mask)
    order = np.lexsort((frequencies[candidates], -magnitudes[candidates]))
    selected = candidates[order][:max(count, 0)]

    return [
        SpectralPeak(frequency_hz=float(frequencies[i]), magnitude=float(magnitudes[i]))
        for i in selected
    ]


def spectral_subtraction(
    spectrum: np.ndarray,
    noise_spectrum: np.ndarray,
    bin_width: int = 1,
    threshold: float = DEFAULT_NOISE_THRESHOLD,
) -> np.ndarray:
    """
    Ratio-based spectral subtraction over groups of bins.

    Per group, signal and noise magnitudes are summed. If the noise sum
    reaches the signal sum the group is zeroed, otherwise every bin is
    scaled by (1 - noise_sum / signal_sum). Afterwards every bin whose
    magnitude is below `threshold` is zeroed.

    Returns:
        Cleaned copy of `spectrum`
    """
    if spectrum.shape != noise_spectrum.shape:
        raise DimensionMismatchError(
            f"Spectrum shapes differ: {spectrum.shape} vs {noise_spectrum.shape}"
        )

    cleaned = np.array(spectrum, dtype=np.complex128)
    num_bins = len(cleaned)
    if num_bins == 0:
        return cleaned

    starts = np.arange(0, num_bins, max(1, bin_width))
    signal_sum = np.add.reduceat(compute_magnitude(cleaned), starts)
    noise_sum = np.add.reduceat(compute_magnitude(noise_spectrum), starts)

    gain = np.zeros_like(signal_sum)
    keep = noise_sum < signal_sum
    gain[keep] = 1 - noise_sum[keep] / signal_sum[keep]

    cleaned *= np.repeat(gain, np.diff(np.append(starts, num_bins)))
    cleaned[compute_magnitude(cleaned) < threshold] = 0
    return cleaned


def _validate_signal(data: np.ndarray, sample_rate: int, min_samples: int) -> np.ndarray:
    data = np.asarray(data, dtype=np.float64)
    if data.ndim != 1:
        raise InvalidConfigurationError("Fourier engines require a 1D signal")
    if sample_rate <= 0:
        raise InvalidConfigurationError(f"Sample rate must be positive, got: {sample_rate}")
    if len(data) < min_samples:
        raise InvalidConfigurationError(
            f"Signal needs at least {min_samples} samples, got: {len(data)}"
        )
    return data


# ============================================================
# FULL SPECTRUM
# ============================================================

class FFTEngine:
    """
    Complex FFT over the whole signal.

    Bin k corresponds to k * sample_rate / N for k in [0, N).
    The spectrum of the bound signal is computed once on first use.
    """

    variant = FFTVariant.FULL

    def __init__(self, data: np.ndarray, sample_rate: int):
        self.signal = _validate_signal(data, sample_rate, min_samples=1)
        self.sample_rate = sample_rate
        self.num_samples = len(self.signal)
        self._spectrum: Optional[np.ndarray] = None

    @property
    def frequency_resolution(self) -> float:
        """Bin spacing in Hz."""
        return self.sample_rate / self.num_samples

    @property
    def bin_count(self) -> int:
        return self.num_samples

    @property
    def spectrum(self) -> np.ndarray:
        """Spectrum of the bound signal."""
        if self._spectrum is None:
            self._spectrum = self.forward(self.signal)
        return self._spectrum

    def forward(self, data: np.ndarray) -> np.ndarray:
        """FFT along the last axis (2D input transforms every row)."""
        return np.fft.fft(np.asarray(data, dtype=np.float64), axis=-1)

    def inverse(self, spectrum: np.ndarray) -> np.ndarray:
        """Real part of the inverse FFT along the last axis."""
        return np.fft.ifft(spectrum, axis=-1).real

    def frequency_bins(self) -> np.ndarray:
        return np.arange(self.bin_count) * self.frequency_resolution

    def bin_width(self, interval_hz: float) -> int:
        return compute_bin_width(interval_hz, self.frequency_resolution)

    def bins_for_interval(self, interval_hz: float) -> np.ndarray:
        """Frequency axis produced by aggregate_by_bin_interval()."""
        width = self.bin_width(interval_hz)
        return np.arange(self.bin_count // width + 1) * width * self.frequency_resolution

    def aggregate_by_bin_interval(
        self,
        magnitude: np.ndarray,
        interval_hz: float,
    ) -> tuple[np.ndarray, np.ndarray]:
        return aggregate_by_bin_interval(magnitude, self.sample_rate, self.num_samples, interval_hz)

    def find_characteristic_frequencies(
        self,
        interval_hz: float,
        magnitude: np.ndarray,
        count: int,
        min_frequency: float = 0.0,
        max_frequency: float = np.inf,
    ) -> list[SpectralPeak]:
        """Aggregate `magnitude` to `interval_hz` bins, then extract peaks."""
        frequencies, combined = self.aggregate_by_bin_interval(magnitude, interval_hz)
        return find_peaks(frequencies, combined, count, min_frequency, max_frequency)

    def reduce_noise(
        self,
        noise_signal: np.ndarray,
        interval_hz: float = 0.0,
        threshold: float = DEFAULT_NOISE_THRESHOLD,
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Spectral subtraction of a noise recording from the bound signal.

        The noise is tiled or truncated to N samples first. With
        `interval_hz` > 0, bins are processed in groups of
        round(interval_hz / resolution) native bins.

        Args:
            noise_signal: Noise-only time-domain signal (any length > 0)
            interval_hz: Group width in Hz (<= 0 means per bin)
            threshold: Magnitude below which bins are zeroed

        Returns:
            Tuple of (cleaned time-domain signal, cleaned spectrum)
        """
        noise = resize_signal(noise_signal, self.num_samples)
        noise_spectrum = self.forward(noise)
        width = 1 if interval_hz <= 0 else self.bin_width(interval_hz)

        cleaned_spectrum = spectral_subtraction(self.spectrum, noise_spectrum, width, threshold)
        return self.inverse(cleaned_spectrum), cleaned_spectrum


# ============================================================
# HALF SPECTRUM (REAL INPUT)
# ============================================================

class RealFFTEngine:
    """
    Real-input FFT returning N//2 + 1 bins.

    Resolution is sample_rate / (2 * (M - 1)) with M = N//2 + 1 the
    half-spectrum length. For even N this equals sample_rate / N.
    """

    variant = FFTVariant.REAL

    def __init__(self, data: np.ndarray, sample_rate: int):
        self.signal = _validate_signal(data, sample_rate, min_samples=2)
        self.sample_rate = sample_rate
        self.num_samples = len(self.signal)
        self._spectrum: Optional[np.ndarray] = None

    @property
    def bin_count(self) -> int:
        return self.num_samples // 2 + 1

    @property
    def frequency_resolution(self) -> float:
        return self.sample_rate / (2 * (self.bin_count - 1))

    @property
    def spectrum(self) -> np.ndarray:
        if self._spectrum is None:
            self._spectrum = self.forward(self.signal)
        return self._spectrum

    def forward(self, data: np.ndarray) -> np.ndarray:
        return np.fft.rfft(np.asarray(data, dtype=np.float64), axis=-1)

    def inverse(self, spectrum: np.ndarray) -> np.ndarray:
        """Inverse real FFT, always N samples long."""
        return np.fft.irfft(spectrum, n=self.num_samples, axis=-1)

    def frequency_bins(self) -> np.ndarray:
        return np.arange(self.bin_count) * self.frequency_resolution

    def bin_width(self, interval_hz: float) -> int:
        return compute_bin_width(interval_hz, self.frequency_resolution)

    def bins_for_interval(self, interval_hz: float) -> np.ndarray:
        width = self.bin_width(interval_hz)
        return np.arange(self.bin_count // width + 1) * width * self.frequency_resolution

    def aggregate_by_bin_interval(
        self,
        magnitude: np.ndarray,
        interval_hz: float,
    ) -> tuple[np.ndarray, np.ndarray]:
        magnitude = np.asarray(magnitude, dtype=np.float64)
        if len(magnitude) != self.bin_count:
            raise DimensionMismatchError(
                f"Expected {self.bin_count} half-spectrum bins, got: {len(magnitude)}"
            )
        return aggregate_magnitude(magnitude, self.frequency_resolution, interval_hz)

    def find_characteristic_frequencies(
        self,
        interval_hz: float,
        magnitude: np.ndarray,
        count: int,
        min_frequency: float = 0.0,
        max_frequency: float = np.inf,
    ) -> list[SpectralPeak]:
        frequencies, combined = self.aggregate_by_bin_interval(magnitude, interval_hz)
        return find_peaks(frequencies, combined, count, min_frequency, max_frequency)

    def reduce_noise(
        self,
        noise_signal: np.ndarray,
        interval_hz: float = 0.0,
        threshold: float = DEFAULT_NOISE_THRESHOLD,
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Per-bin spectral subtraction on the half spectrum.

        `interval_hz` is accepted for interface compatibility with
        FFTEngine.reduce_noise(); bins are never grouped here.
        """
        noise = resize_signal(noise_signal, self.num_samples)
        cleaned_spectrum = spectral_subtraction(self.spectrum, self.forward(noise), 1, threshold)
        return self.inverse(cleaned_spectrum), cleaned_spectrum


FourierEngine = Union[FFTEngine, RealFFTEngine]


def create_engine(
    data: np.ndarray,
    sample_rate: int,
    variant: FFTVariant = FFTVariant.FULL,
) -> FourierEngine:
    """Build the engine for `variant` bound to `data`."""
    if variant is FFTVariant.FULL:
        return FFTEngine(data, sample_rate)
    elif variant is FFTVariant.REAL:
        return RealFFTEngine(data, sample_rate)
    else:
        raise InvalidConfigurationError(f"Unknown FFT variant: {variant}")
