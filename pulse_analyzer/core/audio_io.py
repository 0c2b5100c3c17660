"""
Audio I/O Module

Loads PCM WAV captures and writes single-channel WAV files.

Technical assumptions:
- WAV containers are parsed with soundfile (libsndfile)
- Only 8-bit unsigned and 16-bit signed PCM are decoded
- 16-bit sample s -> s / 32768.0, 8-bit byte b -> (b - 128) / 128.0
- Multi-channel input is reduced to ONE channel by taking every
  channel-th sample starting at 0 (channel selection, not averaging)
- The raw interleaved PCM bytes are kept next to the decoded signal
"""

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

from .exceptions import InvalidConfigurationError, UnsupportedFormatError


logger = logging.getLogger(__name__)

# Bytes per sample for the PCM subtypes that can be decoded
_SUBTYPE_SAMPLE_WIDTH = {
    "PCM_U8": 1,
    "PCM_16": 2,
}

_BIT_DEPTH_SUBTYPE = {
    8: "PCM_U8",
    16: "PCM_16",
    24: "PCM_24",
    32: "PCM_32",
}


@dataclass
class AudioData:
    """
    A decoded PCM capture with its format metadata.

    Attributes:
        channels: Channel count of the file
        sample_width: Bytes per sample (1 or 2)
        sample_rate: Sample rate in Hz
        number_of_samples: Frames per channel in the file
        raw_bytes: Interleaved PCM bytes as stored in the file
        decimal_signal: First channel decoded to float64
        file_path: Source file, if loaded from disk
    """
    channels: int
    sample_width: int
    sample_rate: int
    number_of_samples: int
    raw_bytes: bytes
    decimal_signal: np.ndarray
    file_path: Optional[Path] = None

    def __post_init__(self):
        """Validate data integrity."""
        if self.channels < 1:
            raise InvalidConfigurationError(f"Channel count must be positive, got: {self.channels}")
        if self.decimal_signal.ndim != 1:
            raise InvalidConfigurationError("Decoded signal must be 1D")

    @property
    def duration_seconds(self) -> float:
        return self.number_of_samples / self.sample_rate

    def sample_to_time(self, sample: int) -> float:
        """Convert sample index to time in seconds."""
        return sample / self.sample_rate


def decode_pcm(raw_bytes: bytes, sample_width: int, channels: int = 1) -> np.ndarray:
    """
    Decode interleaved little-endian PCM bytes to float64.

    Args:
        raw_bytes: Interleaved PCM data
        sample_width: Bytes per sample (1 = unsigned 8-bit, 2 = signed 16-bit)
        channels: Interleaved channel count; only channel 0 is kept

    Returns:
        1D decoded signal of channel 0

    Raises:
        UnsupportedFormatError: Any other sample width
    """
    if sample_width == 2:
        usable = len(raw_bytes) - len(raw_bytes) % 2
        samples = np.frombuffer(raw_bytes[:usable], dtype="<i2").astype(np.float64) / 32768.0
    elif sample_width == 1:
        samples = (np.frombuffer(raw_bytes, dtype=np.uint8).astype(np.float64) - 128) / 128.0
    else:
        raise UnsupportedFormatError(f"Unsupported sample width: {sample_width} bytes")

    if channels > 1:
        samples = samples[::channels]

    return samples


def load_audio(file_path: str | Path) -> AudioData:
    """
    Load a PCM WAV file.

    Args:
        file_path: Path to audio file

    Returns:
        AudioData with raw bytes and the decoded first channel

    Raises:
        FileNotFoundError: File does not exist
        UnsupportedFormatError: Not a WAV file, or not 8/16-bit PCM
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    if path.suffix.lower() != ".wav":
        raise UnsupportedFormatError(f"Unsupported format: {path.suffix}")

    info = sf.info(path)
    sample_width = _SUBTYPE_SAMPLE_WIDTH.get(info.subtype)
    if sample_width is None:
        raise UnsupportedFormatError(f"Unsupported WAV subtype: {info.subtype}")

    # libsndfile hands out unsigned 8-bit data as (b - 128) << 8
    frames, sample_rate = sf.read(path, dtype="int16", always_2d=True)
    if sample_width == 2:
        raw_bytes = frames.astype("<i2").tobytes()
    else:
        raw_bytes = ((frames >> 8) + 128).astype(np.uint8).tobytes()

    num_samples, channels = frames.shape
    logger.info(
        "Loaded %s: %d Hz, %d channel(s), %d-bit, %d samples",
        path.name, sample_rate, channels, sample_width * 8, num_samples,
    )

    return AudioData(
        channels=channels,
        sample_width=sample_width,
        sample_rate=sample_rate,
        number_of_samples=num_samples,
        raw_bytes=raw_bytes,
        decimal_signal=decode_pcm(raw_bytes, sample_width, channels),
        file_path=path,
    )


def save_audio(
    data: np.ndarray,
    file_path: str | Path,
    sample_rate: int,
    bit_depth: int = 16,
) -> Path:
    """
    Save a single-channel signal as PCM WAV file.

    ".wav" is appended if the path does not already end with it.

    Args:
        data: Audio data as numpy array (float, range -1.0 to 1.0)
        file_path: Target path
        sample_rate: Sample rate
        bit_depth: 8, 16, 24 or 32

    Returns:
        The path actually written

    Raises:
        UnsupportedFormatError: Unknown bit depth
        InvalidConfigurationError: Data is not a 1D float array
    """
    path = Path(file_path)
    if not str(path).endswith(".wav"):
        path = path.with_name(path.name + ".wav")

    subtype = _BIT_DEPTH_SUBTYPE.get(bit_depth)
    if subtype is None:
        raise UnsupportedFormatError(f"Unsupported bit depth: {bit_depth}")

    data = np.asarray(data)
    if data.ndim != 1:
        raise InvalidConfigurationError("Only single-channel signals can be saved")

    if not np.issubdtype(data.dtype, np.floating):
        raise InvalidConfigurationError("Audio data must be float")

    # Clipping warning
    if np.any(np.abs(data) > 1.0):
        warnings.warn(
            "Audio data exceeds [-1.0, 1.0]. Clipping will be applied.",
            UserWarning
        )
        data = np.clip(data, -1.0, 1.0)

    sf.write(path, data, sample_rate, subtype=subtype)
    logger.debug("Wrote %d samples to %s", len(data), path)
    return path
