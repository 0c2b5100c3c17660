"""
Signal Processor

Runs the pulse workflow on one SignalData:

1. detect_pulses()            -> pulse starts and noise drops
2. identify_noise_segments()  -> noise-only signal
3. reduce_noise()             -> cleaned signal replaces the original
4. extract_pulses() / save_pulses()
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import numpy as np

from .audio_io import save_audio
from .fft import DEFAULT_NOISE_THRESHOLD
from .noise_reduction import isolate_noise, reduce_noise
from .pulse_detection import (
    PulseDetectionConfig,
    PulseDetectionResult,
    PulseDiagnostics,
    detect_pulses,
)
from .signal_data import SignalData


logger = logging.getLogger(__name__)


@dataclass
class NoiseReductionResult:
    """Output of one noise reduction run."""
    noise_signal: np.ndarray
    cleaned_signal: np.ndarray
    cleaned_spectrum: np.ndarray
    cleaned_magnitude_spectrum: np.ndarray


class SignalProcessor:
    """
    Pulse detection and noise reduction for one capture.

    The processor mutates the SignalData it was given: detection stores
    pulse indices on it, noise reduction replaces its time-domain signal.
    """

    def __init__(self, data: SignalData, bit_depth: Optional[int] = None):
        self.data = data
        self.bit_depth = bit_depth or data.sample_width * 8 or 16
        self.noise_signal = np.zeros(0)

    def detect_pulses(
        self,
        config: Optional[PulseDetectionConfig] = None,
        on_diagnostics: Optional[Callable[[PulseDiagnostics], None]] = None,
    ) -> PulseDetectionResult:
        """Detect pulses in the current time-domain signal and store the indices."""
        cfg = config or PulseDetectionConfig(window_size=self.data.window_size)
        result = detect_pulses(self.data.time_domain_signal, cfg, on_diagnostics)

        self.data.pulse_sample_indices = result.pulse_start_indices
        self.data.noise_drop_sample_indices = result.noise_drop_indices

        logger.info(
            "Detected %d pulse(s) and %d noise drop(s)",
            result.pulse_count, len(result.noise_drop_indices),
        )
        return result

    def identify_noise_segments(self) -> np.ndarray:
        """Rebuild the noise-only signal from the stored indices."""
        self.noise_signal = isolate_noise(
            self.data.time_domain_signal,
            self.data.pulse_sample_indices,
            self.data.pulse_width,
            self.data.noise_drop_sample_indices,
            self.data.window_size,
        )
        logger.debug(
            "Noise profile: %d of %d samples",
            len(self.noise_signal), self.data.number_of_samples,
        )
        return self.noise_signal

    def reduce_noise(
        self,
        interval_hz: float = 0.0,
        threshold: float = DEFAULT_NOISE_THRESHOLD,
    ) -> NoiseReductionResult:
        """
        Remove the background noise from the capture.

        The cleaned signal replaces the time-domain signal of the
        SignalData, which drops all of its cached spectra.
        """
        noise_signal = self.identify_noise_segments()
        cleaned_signal, cleaned_spectrum, cleaned_magnitude = reduce_noise(
            self.data.stft, noise_signal, interval_hz, threshold
        )
        self.data.time_domain_signal = cleaned_signal

        return NoiseReductionResult(
            noise_signal=noise_signal,
            cleaned_signal=cleaned_signal,
            cleaned_spectrum=cleaned_spectrum,
            cleaned_magnitude_spectrum=cleaned_magnitude,
        )

    def extract_pulses(self) -> List[np.ndarray]:
        """
        Cut `pulse_width` samples at every pulse start.

        Starts before 0 are moved to 0; pulses that would run past the
        end are shortened; starts beyond the end are skipped.
        """
        data = self.data.time_domain_signal
        pulses = []
        for start in self.data.pulse_sample_indices:
            start = max(int(start), 0)
            if start >= len(data):
                logger.warning("Pulse start %d lies beyond the signal end", start)
                continue
            pulses.append(data[start:start + self.data.pulse_width].copy())
        return pulses

    def save_pulses(self, output_directory: str | Path, base_name: str) -> List[Path]:
        """Write every extracted pulse as <base_name>_<i>.wav."""
        directory = Path(output_directory)
        directory.mkdir(parents=True, exist_ok=True)

        return [
            save_audio(pulse, directory / f"{base_name}_{i}", self.data.sample_rate, self.bit_depth)
            for i, pulse in enumerate(self.extract_pulses())
        ]
