"""
Short-Time Fourier Transform

Hamming-windowed framing with a per-frame complex FFT, overlap-add
reconstruction and frame-wise spectral subtraction.

Technical assumptions:
- Frames are never zero-padded: frame_count = (N - window) // hop + 1
- Samples after the end of the last full frame are not analyzed and
  stay 0 in any reconstruction
- Each frame carries all window_size complex bins (full FFT)
- Synthesis applies the same Hamming window again, without
  normalizing the overlap-add gain
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .exceptions import DimensionMismatchError, InvalidConfigurationError
from .fft import DEFAULT_NOISE_THRESHOLD, FFTEngine, compute_bin_width
from .signal_processing import compute_magnitude, hamming_window, resize_signal


@dataclass
class STFTConfig:
    """
    Framing parameters for the STFT.

    Attributes:
        window_size: Samples per frame (also the FFT size)
        hop_size: Step between frame starts in samples
    """
    window_size: int = 4096
    hop_size: int = 2048

    def __post_init__(self):
        if self.window_size < 1:
            raise InvalidConfigurationError(
                f"Window size must be at least 1, got: {self.window_size}"
            )
        if self.hop_size < 1:
            raise InvalidConfigurationError(
                f"Hop size must be at least 1, got: {self.hop_size}"
            )

    @property
    def effective_overlap(self) -> float:
        """Overlap between neighbouring frames in percent (0 if they do not touch)."""
        return max(0.0, (1 - self.hop_size / self.window_size) * 100)

    def frequency_resolution(self, sample_rate: int) -> float:
        """Frequency resolution in Hz."""
        return sample_rate / self.window_size

    def time_resolution(self, sample_rate: int) -> float:
        """Time resolution in seconds."""
        return self.hop_size / sample_rate


class STFTEngine:
    """
    STFT bound to one signal.

    The frame count is fixed at construction. Every signal passed to
    frame_spectrum() must be at least as long as the bound signal's
    analyzed span.
    """

    def __init__(
        self,
        data: np.ndarray,
        sample_rate: int,
        window_size: int = 4096,
        hop_size: int = 2048,
    ):
        data = np.asarray(data, dtype=np.float64)
        config = STFTConfig(window_size=window_size, hop_size=hop_size)

        if len(data) < config.window_size:
            raise InvalidConfigurationError(
                f"Signal ({len(data)} samples) is shorter than the window ({config.window_size})"
            )

        self.signal = data
        self.sample_rate = sample_rate
        self.window_size = config.window_size
        self.hop_size = config.hop_size
        self.num_samples = len(data)
        self.frame_count = (self.num_samples - self.window_size) // self.hop_size + 1

        self._fft = FFTEngine(data, sample_rate)
        self._window = hamming_window(self.window_size)
        self._spectrum: Optional[np.ndarray] = None

    @classmethod
    def from_config(cls, data: np.ndarray, sample_rate: int, config: STFTConfig) -> "STFTEngine":
        return cls(data, sample_rate, config.window_size, config.hop_size)

    @property
    def window(self) -> np.ndarray:
        return self._window.copy()

    @property
    def spectrum(self) -> np.ndarray:
        """Frame spectrum of the bound signal, computed once."""
        if self._spectrum is None:
            self._spectrum = self.frame_spectrum(self.signal)
        return self._spectrum

    def time_bins(self) -> np.ndarray:
        """Start time of every frame in seconds."""
        return np.arange(self.frame_count) * self.hop_size / self.sample_rate

    def frequency_bins(self) -> np.ndarray:
        """Frequency of every per-frame bin in Hz."""
        return np.arange(self.window_size) * self.sample_rate / self.window_size

    def _frames(self, data: np.ndarray) -> np.ndarray:
        data = np.asarray(data, dtype=np.float64)
        span = (self.frame_count - 1) * self.hop_size + self.window_size
        if len(data) < span:
            raise DimensionMismatchError(
                f"Signal has {len(data)} samples, framing needs {span}"
            )
        views = np.lib.stride_tricks.sliding_window_view(data[:span], self.window_size)
        return views[::self.hop_size]

    def frame_spectrum(self, data: np.ndarray) -> np.ndarray:
        """
        Windowed FFT of every frame.

        Args:
            data: Time-domain signal

        Returns:
            Complex array, Shape: (frame_count, window_size)
        """
        return self._fft.forward(self._frames(data) * self._window)

    def magnitude_spectrum(self, data: Optional[np.ndarray] = None) -> np.ndarray:
        """Magnitude per frame and bin (defaults to the bound signal)."""
        spectrum = self.spectrum if data is None else self.frame_spectrum(data)
        return compute_magnitude(spectrum)

    @staticmethod
    def average_magnitude(magnitude_spectrum: np.ndarray) -> np.ndarray:
        """Elementwise mean across frames."""
        return np.mean(magnitude_spectrum, axis=0)

    def reconstruct(self, spectrum: np.ndarray) -> np.ndarray:
        """
        Overlap-add synthesis.

        Every frame is inverse transformed, windowed again and added at
        frame * hop_size into an N-sample buffer. Frame parts that would
        run past N are dropped.

        Args:
            spectrum: Complex array, Shape: (frame_count, window_size)

        Returns:
            Time-domain signal with N samples
        """
        spectrum = np.asarray(spectrum)
        expected = (self.frame_count, self.window_size)
        if spectrum.shape != expected:
            raise DimensionMismatchError(
                f"Expected spectrum shape {expected}, got: {spectrum.shape}"
            )

        frames = self._fft.inverse(spectrum) * self._window
        output = np.zeros(self.num_samples)

        for i, frame in enumerate(frames):
            start = i * self.hop_size
            end = min(start + self.window_size, self.num_samples)
            output[start:end] += frame[:end - start]

        return output

    def noise_profile(self, noise_signal: np.ndarray, interval_hz: float = 0.0) -> np.ndarray:
        """
        Average noise magnitude per bin.

        The noise is tiled or truncated to N samples before framing.
        With `interval_hz` > 0 the profile is smoothed by averaging over
        groups of round(interval_hz / (sample_rate / window_size)) bins.
        """
        noise = resize_signal(noise_signal, self.num_samples)
        profile = self.average_magnitude(self.magnitude_spectrum(noise))

        width = compute_bin_width(interval_hz, self.sample_rate / self.window_size)
        if width > 1:
            starts = np.arange(0, len(profile), width)
            counts = np.diff(np.append(starts, len(profile)))
            profile = np.repeat(np.add.reduceat(profile, starts) / counts, counts)

        return profile

    def reduce_noise(
        self,
        noise_signal: np.ndarray,
        interval_hz: float = 0.0,
        threshold: float = DEFAULT_NOISE_THRESHOLD,
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Frame-wise spectral subtraction.

        Every bin magnitude is reduced by the average noise magnitude of
        that bin and floored at 0. The original phase is kept.

        Args:
            noise_signal: Noise-only time-domain signal (any length > 0)
            interval_hz: Optional smoothing width for the noise profile
            threshold: Cleaned magnitudes below this are set to 0

        Returns:
            Tuple of (cleaned signal, cleaned spectrum, cleaned magnitude spectrum)
        """
        profile = self.noise_profile(noise_signal, interval_hz)

        spectrum = self.spectrum
        magnitude = np.maximum(0.0, compute_magnitude(spectrum) - profile)
        magnitude[magnitude < threshold] = 0.0

        phase = np.arctan2(spectrum.imag, spectrum.real)
        cleaned_spectrum = magnitude * np.exp(1j * phase)

        return self.reconstruct(cleaned_spectrum), cleaned_spectrum, magnitude

    def filter_magnitude_spectrum(
        self,
        magnitude_spectrum: np.ndarray,
        frequency_bins: Optional[np.ndarray] = None,
        min_frequency: float = 0.0,
        max_frequency: float = 5000.0,
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Keep only bins with min_frequency <= f <= max_frequency.

        Returns:
            Tuple of (filtered magnitude spectrum, filtered bins)
        """
        if frequency_bins is None:
            frequency_bins = self.frequency_bins()
        frequency_bins = np.asarray(frequency_bins, dtype=np.float64)
        mask = (frequency_bins >= min_frequency) & (frequency_bins <= max_frequency)
        return np.asarray(magnitude_spectrum)[:, mask], frequency_bins[mask]
