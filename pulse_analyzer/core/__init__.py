"""
Core DSP module - fully testable without any I/O besides WAV/JSON.

This module contains all signal processing logic:
- Audio I/O (PCM WAV)
- Full and real FFT engines, STFT
- Cached signal representation
- Pulse detection and noise reduction
- Baseline comparison
"""

from .audio_io import AudioData, decode_pcm, load_audio, save_audio
from .comparison import SignalAnalyzer, characteristic_frequencies, compare
from .exceptions import (
    DimensionMismatchError,
    InvalidConfigurationError,
    SignalError,
    UnsupportedFormatError,
)
from .fft import FFTEngine, FFTVariant, RealFFTEngine, SpectralPeak, create_engine, find_peaks
from .noise_reduction import isolate_noise, reduce_noise
from .processor import NoiseReductionResult, SignalProcessor
from .pulse_detection import PulseDetectionConfig, PulseDetectionResult, PulseDetector, detect_pulses
from .signal_data import SignalData
from .signal_processing import compute_amplitude, compute_magnitude, resize_signal, to_db
from .stft import STFTConfig, STFTEngine

__all__ = [
    "AudioData",
    "decode_pcm",
    "load_audio",
    "save_audio",
    "SignalAnalyzer",
    "characteristic_frequencies",
    "compare",
    "DimensionMismatchError",
    "InvalidConfigurationError",
    "SignalError",
    "UnsupportedFormatError",
    "FFTEngine",
    "FFTVariant",
    "RealFFTEngine",
    "SpectralPeak",
    "create_engine",
    "find_peaks",
    "isolate_noise",
    "reduce_noise",
    "NoiseReductionResult",
    "SignalProcessor",
    "PulseDetectionConfig",
    "PulseDetectionResult",
    "PulseDetector",
    "detect_pulses",
    "SignalData",
    "compute_amplitude",
    "compute_magnitude",
    "resize_signal",
    "to_db",
    "STFTConfig",
    "STFTEngine",
]
