"""
Signal Representation

Owns one time-domain signal and derives every downstream quantity
(FFT, real FFT, magnitudes, dB forms, STFT spectra) on first access.

Cache policy:
- All derived values live in a single cache dict
- Replacing the signal or the STFT configuration calls invalidate()
  once, which drops EVERYTHING, including the bound engines
- There are no per-field dirty flags; nothing is ever partially stale
- The stored signal is read-only, so it can only change through the
  setter

Not thread-safe. Guard instances with an external lock if they are
shared between threads.
"""

from typing import Any, Callable, Optional

import numpy as np

from .audio_io import AudioData
from .exceptions import InvalidConfigurationError
from .fft import FFTEngine, RealFFTEngine
from .signal_processing import (
    compute_amplitude,
    compute_magnitude,
    compute_time_bins,
    to_db,
)
from .stft import STFTConfig, STFTEngine


class SignalData:
    """
    Time-domain signal with lazily derived spectral views.

    Attributes:
        sample_rate: Sample rate in Hz
        channels: Channel count of the source file (informational)
        sample_width: Bytes per sample of the source file (informational)
        decimal_signal: Decoded source samples, before any processing
        pulse_width: Pulse length in samples
        pulse_sample_indices: Pulse start samples from the last detection
        noise_drop_sample_indices: Noise-drop samples from the last detection
    """

    def __init__(
        self,
        time_domain_signal: Optional[np.ndarray] = None,
        sample_rate: int = 44100,
        stft_config: Optional[STFTConfig] = None,
    ):
        self.sample_rate = sample_rate
        self.channels = 1
        self.sample_width = 2
        self.decimal_signal = np.zeros(0)
        self.pulse_width = 0
        self.pulse_sample_indices = np.zeros(0, dtype=np.int64)
        self.noise_drop_sample_indices = np.zeros(0, dtype=np.int64)

        self._stft_config = stft_config or STFTConfig()
        self._time_domain_signal: Optional[np.ndarray] = None
        self._cache: dict[str, Any] = {}

        if time_domain_signal is not None:
            self.time_domain_signal = time_domain_signal

    @classmethod
    def from_audio(cls, audio: AudioData, stft_config: Optional[STFTConfig] = None) -> "SignalData":
        """Build from decoded audio; the time-domain signal starts as the decimal signal."""
        data = cls(sample_rate=audio.sample_rate, stft_config=stft_config)
        data.channels = audio.channels
        data.sample_width = audio.sample_width
        data.decimal_signal = audio.decimal_signal.copy()
        data.time_domain_signal = audio.decimal_signal
        return data

    # ------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------

    @property
    def time_domain_signal(self) -> Optional[np.ndarray]:
        return self._time_domain_signal

    @time_domain_signal.setter
    def time_domain_signal(self, value: np.ndarray) -> None:
        value = np.array(value, dtype=np.float64)
        if value.ndim != 1:
            raise InvalidConfigurationError("Time-domain signal must be 1D")
        # In-place writes would bypass invalidate(); assign a new array instead
        value.setflags(write=False)
        self._time_domain_signal = value
        self.invalidate()

    @property
    def stft_config(self) -> STFTConfig:
        return self._stft_config

    @stft_config.setter
    def stft_config(self, config: STFTConfig) -> None:
        self._stft_config = config
        self.invalidate()

    @property
    def window_size(self) -> int:
        return self._stft_config.window_size

    @property
    def hop_size(self) -> int:
        return self._stft_config.hop_size

    def invalidate(self) -> None:
        """Drop every derived value and every bound engine."""
        self._cache.clear()

    @property
    def is_empty(self) -> bool:
        return self._time_domain_signal is None

    @property
    def number_of_samples(self) -> int:
        return 0 if self._time_domain_signal is None else len(self._time_domain_signal)

    def _cached(self, key: str, compute: Callable[[], Any]) -> Any:
        if self._time_domain_signal is None:
            raise InvalidConfigurationError("No time-domain signal loaded")
        if key not in self._cache:
            self._cache[key] = compute()
        return self._cache[key]

    # ------------------------------------------------------------
    # Engines (rebound after every invalidate())
    # ------------------------------------------------------------

    @property
    def fft(self) -> FFTEngine:
        return self._cached("fft", lambda: FFTEngine(self._time_domain_signal, self.sample_rate))

    @property
    def rfft(self) -> RealFFTEngine:
        return self._cached("rfft", lambda: RealFFTEngine(self._time_domain_signal, self.sample_rate))

    @property
    def stft(self) -> STFTEngine:
        return self._cached(
            "stft",
            lambda: STFTEngine.from_config(self._time_domain_signal, self.sample_rate, self._stft_config),
        )

    # ------------------------------------------------------------
    # Whole-signal views
    # ------------------------------------------------------------

    @property
    def time_bins(self) -> np.ndarray:
        return self._cached("time_bins", lambda: compute_time_bins(self._time_domain_signal, self.sample_rate))

    @property
    def frequency_domain_signal(self) -> np.ndarray:
        return self._cached("frequency_domain_signal", lambda: self.fft.spectrum)

    @property
    def frequency_bins(self) -> np.ndarray:
        return self._cached("frequency_bins", self.fft.frequency_bins)

    @property
    def amplitude(self) -> np.ndarray:
        return self._cached("amplitude", lambda: compute_amplitude(self._time_domain_signal))

    @property
    def magnitude(self) -> np.ndarray:
        return self._cached("magnitude", lambda: compute_magnitude(self.frequency_domain_signal))

    @property
    def amplitude_db(self) -> np.ndarray:
        return self._cached("amplitude_db", lambda: to_db(self.amplitude))

    @property
    def magnitude_db(self) -> np.ndarray:
        return self._cached("magnitude_db", lambda: to_db(self.magnitude))

    @property
    def real_frequency_domain_signal(self) -> np.ndarray:
        return self._cached("real_frequency_domain_signal", lambda: self.rfft.spectrum)

    @property
    def real_frequency_bins(self) -> np.ndarray:
        return self._cached("real_frequency_bins", self.rfft.frequency_bins)

    @property
    def real_magnitude(self) -> np.ndarray:
        return self._cached("real_magnitude", lambda: compute_magnitude(self.real_frequency_domain_signal))

    # ------------------------------------------------------------
    # STFT views
    # ------------------------------------------------------------

    @property
    def frequency_domain_signal_spectrum(self) -> np.ndarray:
        return self._cached("frequency_domain_signal_spectrum", lambda: self.stft.spectrum)

    @property
    def magnitude_spectrum(self) -> np.ndarray:
        return self._cached(
            "magnitude_spectrum",
            lambda: compute_magnitude(self.frequency_domain_signal_spectrum),
        )

    @property
    def average_magnitude(self) -> np.ndarray:
        return self._cached(
            "average_magnitude",
            lambda: STFTEngine.average_magnitude(self.magnitude_spectrum),
        )

    @property
    def stft_time_bins(self) -> np.ndarray:
        return self._cached("stft_time_bins", self.stft.time_bins)

    @property
    def stft_frequency_bins(self) -> np.ndarray:
        return self._cached("stft_frequency_bins", self.stft.frequency_bins)
