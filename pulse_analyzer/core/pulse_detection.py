"""
Pulse Detection - energy windows, thresholding and run grouping.

The signal is cut into fixed windows. The first window is taken as the
background baseline; windows whose energy exceeds the baseline by more
than threshold_multiplier * baseline are pulse candidates. Runs of
candidates become pulses, gaps between runs mark noise drops.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from .exceptions import InvalidConfigurationError


__all__ = [
    "PulseDetectionConfig",
    "PulseDetectionResult",
    "PulseDiagnostics",
    "PulseDetector",
    "compute_window_energy",
    "detect_pulses",
]

logger = logging.getLogger(__name__)


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass
class PulseDetectionConfig:
    """Configuration for the detection algorithm."""
    window_size: int = 4096
    offset_samples: int = -44100        # Lookback applied to every pulse start
    threshold_multiplier: float = 0.8   # Threshold = multiplier * baseline energy
    min_gap_windows: int = 10           # Larger gaps end a run
    min_pulse_length_windows: int = 5   # A run needs MORE members than this

    def __post_init__(self):
        if self.window_size < 1:
            raise InvalidConfigurationError(
                f"Window size must be at least 1, got: {self.window_size}"
            )
        if self.min_gap_windows < 0:
            raise InvalidConfigurationError(
                f"Minimum gap must not be negative, got: {self.min_gap_windows}"
            )
        if self.min_pulse_length_windows < 0:
            raise InvalidConfigurationError(
                f"Minimum pulse length must not be negative, got: {self.min_pulse_length_windows}"
            )


@dataclass
class PulseDiagnostics:
    """Intermediate values of one detection run, in window units."""
    baseline_energy: float
    energy_threshold: float
    candidate_windows: List[int] = field(default_factory=list)
    pulse_start_windows: List[int] = field(default_factory=list)
    noise_drop_windows: List[int] = field(default_factory=list)


@dataclass
class PulseDetectionResult:
    """Ascending sample indices of pulse starts and noise drops."""
    pulse_start_indices: np.ndarray
    noise_drop_indices: np.ndarray
    diagnostics: Optional[PulseDiagnostics] = None

    @property
    def pulse_count(self) -> int:
        return len(self.pulse_start_indices)


# ============================================================
# CORE ALGORITHM
# ============================================================

def compute_window_energy(data: np.ndarray, window_size: int) -> np.ndarray:
    """
    Mean squared amplitude per window.

    The last window may be shorter; it is averaged over its own length.
    """
    data = np.asarray(data, dtype=np.float64)
    if window_size < 1:
        raise InvalidConfigurationError(f"Window size must be at least 1, got: {window_size}")
    if len(data) == 0:
        return np.zeros(0)

    starts = np.arange(0, len(data), window_size)
    lengths = np.diff(np.append(starts, len(data)))
    return np.add.reduceat(data ** 2, starts) / lengths


def _group_candidates(
    candidates: List[int],
    min_gap_windows: int,
    min_pulse_length_windows: int,
) -> tuple[List[int], List[int]]:
    """Scan candidate windows for pulse starts and noise drops."""
    pulse_starts: List[int] = []
    noise_drops: List[int] = []
    run_length = 0
    searching_start = True

    for i in range(len(candidates) - 1):
        if candidates[i + 1] - candidates[i] > min_gap_windows:
            run_length = 0
            searching_start = True
            noise_drops.append(candidates[i + 1])
            continue

        run_length += 1
        if searching_start and run_length > min_pulse_length_windows:
            searching_start = False
            pulse_starts.append(candidates[i - min_pulse_length_windows])

    starts = set(pulse_starts)
    noise_drops = [w for w in noise_drops if w not in starts]
    return pulse_starts, noise_drops


def detect_pulses(
    data: np.ndarray,
    config: Optional[PulseDetectionConfig] = None,
    on_diagnostics: Optional[Callable[[PulseDiagnostics], None]] = None,
) -> PulseDetectionResult:
    """
    Find pulse onsets and noise-drop windows in a signal.

    Args:
        data: Time-domain signal (1D)
        config: Detection parameters
        on_diagnostics: Called once with the intermediate window values

    Returns:
        PulseDetectionResult with sample indices
        (pulse start = window * window_size + offset_samples,
        noise drop = window * window_size)
    """
    cfg = config or PulseDetectionConfig()
    energy = compute_window_energy(data, cfg.window_size)

    if len(energy) == 0:
        empty = np.zeros(0, dtype=np.int64)
        return PulseDetectionResult(empty, empty.copy())

    baseline = float(energy[0])
    threshold = cfg.threshold_multiplier * baseline

    candidates = (np.flatnonzero(energy[1:] - baseline > threshold) + 1).tolist()
    pulse_windows, drop_windows = _group_candidates(
        candidates, cfg.min_gap_windows, cfg.min_pulse_length_windows
    )

    diagnostics = PulseDiagnostics(
        baseline_energy=baseline,
        energy_threshold=threshold,
        candidate_windows=candidates,
        pulse_start_windows=pulse_windows,
        noise_drop_windows=drop_windows,
    )

    if pulse_windows:
        logger.debug("Candidate pulse windows: %s", candidates)
        logger.debug("Pulse start windows: %s", pulse_windows)
        logger.debug("Noise drop windows: %s", drop_windows)
    else:
        logger.debug("No significant pulses detected")

    if on_diagnostics is not None:
        on_diagnostics(diagnostics)

    pulse_starts = np.asarray(pulse_windows, dtype=np.int64) * cfg.window_size + cfg.offset_samples
    noise_drops = np.asarray(drop_windows, dtype=np.int64) * cfg.window_size

    return PulseDetectionResult(
        pulse_start_indices=pulse_starts,
        noise_drop_indices=np.sort(noise_drops),
        diagnostics=diagnostics,
    )


# ============================================================
# WRAPPER CLASS
# ============================================================

class PulseDetector:
    """
    Pulse detector with fixed parameters.
    """
    def __init__(
        self,
        config: Optional[PulseDetectionConfig] = None,
        on_diagnostics: Optional[Callable[[PulseDiagnostics], None]] = None,
    ):
        self.config = config or PulseDetectionConfig()
        self.on_diagnostics = on_diagnostics

    def detect(self, data: np.ndarray) -> PulseDetectionResult:
        return detect_pulses(data, self.config, self.on_diagnostics)
