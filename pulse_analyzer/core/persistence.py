"""
Signal Side-Car Files

Stores capture metadata and analysis results next to a recording as
JSON. The document has two sections:

    {
        "Audio Data":  {"Channels", "Sample Width", "Sample Rate",
                        "Number Of Samples", "Decimal Signal"},
        "Signal Data": {"PulseWidth", "Pulse Sample Indices",
                        "Noise Drop Sample Indices", "Time Domain Signal"}
    }

Writing merges into an existing file, so the audio section written at
ingestion time survives later writes of the signal section. Missing keys
read back as 0 or empty; a missing time-domain signal falls back to the
decimal signal.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import numpy as np

from .audio_io import AudioData
from .signal_data import SignalData
from .stft import STFTConfig


logger = logging.getLogger(__name__)

AUDIO_SECTION = "Audio Data"
AUDIO_CHANNELS = "Channels"
AUDIO_SAMPLE_WIDTH = "Sample Width"
AUDIO_SAMPLE_RATE = "Sample Rate"
AUDIO_NUMBER_OF_SAMPLES = "Number Of Samples"
AUDIO_DECIMAL_SIGNAL = "Decimal Signal"

SIGNAL_SECTION = "Signal Data"
SIGNAL_PULSE_WIDTH = "PulseWidth"
SIGNAL_PULSE_SAMPLE_INDICES = "Pulse Sample Indices"
SIGNAL_NOISE_DROP_SAMPLE_INDICES = "Noise Drop Sample Indices"
SIGNAL_TIME_DOMAIN_SIGNAL = "Time Domain Signal"


def _load_document(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _update_section(path: Path, section: str, values: dict[str, Any]) -> None:
    document = _load_document(path)
    document.setdefault(section, {}).update(values)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
    logger.debug("Updated section '%s' in %s", section, path)


def write_audio_data(file_path: str | Path, audio: AudioData) -> None:
    """Store ingestion metadata and the decoded signal."""
    _update_section(Path(file_path), AUDIO_SECTION, {
        AUDIO_CHANNELS: audio.channels,
        AUDIO_SAMPLE_WIDTH: audio.sample_width,
        AUDIO_SAMPLE_RATE: audio.sample_rate,
        AUDIO_NUMBER_OF_SAMPLES: audio.number_of_samples,
        AUDIO_DECIMAL_SIGNAL: np.asarray(audio.decimal_signal, dtype=float).tolist(),
    })


def write_signal_data(file_path: str | Path, data: SignalData) -> None:
    """Store pulse analysis results and the current time-domain signal."""
    time_domain = data.time_domain_signal
    _update_section(Path(file_path), SIGNAL_SECTION, {
        SIGNAL_PULSE_WIDTH: int(data.pulse_width),
        SIGNAL_PULSE_SAMPLE_INDICES: [int(i) for i in data.pulse_sample_indices],
        SIGNAL_NOISE_DROP_SAMPLE_INDICES: [int(i) for i in data.noise_drop_sample_indices],
        SIGNAL_TIME_DOMAIN_SIGNAL: [] if time_domain is None else time_domain.tolist(),
    })


def read_signal_file(
    file_path: str | Path,
    stft_config: Optional[STFTConfig] = None,
) -> SignalData:
    """
    Restore a SignalData from a side-car file.

    Raises:
        FileNotFoundError: File does not exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Signal file not found: {path}")

    document = _load_document(path)
    audio = document.get(AUDIO_SECTION, {})
    signal = document.get(SIGNAL_SECTION, {})

    data = SignalData(sample_rate=int(audio.get(AUDIO_SAMPLE_RATE, 0)), stft_config=stft_config)
    data.channels = int(audio.get(AUDIO_CHANNELS, 0))
    data.sample_width = int(audio.get(AUDIO_SAMPLE_WIDTH, 0))
    data.decimal_signal = np.asarray(audio.get(AUDIO_DECIMAL_SIGNAL, []), dtype=np.float64)

    data.pulse_width = int(signal.get(SIGNAL_PULSE_WIDTH, 0))
    data.pulse_sample_indices = np.asarray(signal.get(SIGNAL_PULSE_SAMPLE_INDICES, []), dtype=np.int64)
    data.noise_drop_sample_indices = np.asarray(
        signal.get(SIGNAL_NOISE_DROP_SAMPLE_INDICES, []), dtype=np.int64
    )

    time_domain = signal.get(SIGNAL_TIME_DOMAIN_SIGNAL) or data.decimal_signal
    data.time_domain_signal = np.asarray(time_domain, dtype=np.float64)
    return data
