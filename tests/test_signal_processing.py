"""
Tests für elementweise Signaltransformationen.
"""

import pytest
import numpy as np

from pulse_analyzer.core.exceptions import InvalidConfigurationError
from pulse_analyzer.core.signal_processing import (
    compute_amplitude,
    compute_magnitude,
    compute_time_bins,
    hamming_window,
    resize_signal,
    to_db,
)


class TestElementwise:
    """Tests für Amplitude, Magnitude und dB."""

    def test_amplitude(self):
        """Amplitude ist der Betrag jedes Samples."""
        result = compute_amplitude(np.array([-0.5, 0.0, 0.25]))
        np.testing.assert_array_equal(result, [0.5, 0.0, 0.25])

    def test_magnitude(self):
        """Magnitude ist der Betrag komplexer Bins."""
        result = compute_magnitude(np.array([3 + 4j, -1j, 0]))
        np.testing.assert_allclose(result, [5.0, 1.0, 0.0])

    def test_to_db(self):
        """20*log10 ohne Begrenzung."""
        result = to_db(np.array([1.0, 10.0, 0.1]))
        np.testing.assert_allclose(result, [0.0, 20.0, -20.0])

    def test_to_db_zero(self):
        """0 ergibt -inf, negative Werte NaN."""
        result = to_db(np.array([0.0, -1.0]))

        assert result[0] == -np.inf
        assert np.isnan(result[1])


class TestResize:
    """Tests für Kacheln und Kürzen."""

    def test_resize_tiling(self):
        """Kürzeres Signal wird gekachelt, letzte Kopie partiell."""
        result = resize_signal(np.array([1.0, 2.0, 3.0]), 7)
        np.testing.assert_array_equal(result, [1, 2, 3, 1, 2, 3, 1])

    def test_resize_exact_multiple(self):
        """Ganzzahliges Vielfaches ohne Restkopie."""
        result = resize_signal(np.array([1.0, 2.0]), 6)
        np.testing.assert_array_equal(result, [1, 2, 1, 2, 1, 2])

    def test_resize_truncate(self):
        """Längeres Signal wird auf die ersten Samples gekürzt."""
        result = resize_signal(np.arange(10, dtype=float), 4)
        np.testing.assert_array_equal(result, [0, 1, 2, 3])

    def test_resize_identity(self):
        """Gleiche Länge liefert identische Werte."""
        data = np.random.randn(100)
        np.testing.assert_array_equal(resize_signal(data, len(data)), data)

    def test_resize_returns_copy(self):
        """Ergebnis ist nie ein Alias des Eingangs."""
        data = np.ones(5)
        result = resize_signal(data, 5)
        result[0] = 99

        assert data[0] == 1

    def test_resize_empty_signal(self):
        """Leeres Signal kann nicht gekachelt werden."""
        with pytest.raises(InvalidConfigurationError):
            resize_signal(np.zeros(0), 10)

    def test_resize_negative_length(self):
        """Negative Länge wird abgelehnt."""
        with pytest.raises(InvalidConfigurationError):
            resize_signal(np.ones(3), -1)


class TestWindowAndTime:
    """Tests für Hamming-Fenster und Zeitachse."""

    def test_hamming_formula(self):
        """Fenster entspricht 0.54 - 0.46*cos(2πi/(N-1))."""
        size = 64
        i = np.arange(size)
        expected = 0.54 - 0.46 * np.cos(2 * np.pi * i / (size - 1))

        np.testing.assert_allclose(hamming_window(size), expected, atol=1e-12)

    def test_hamming_invalid_size(self):
        """Fenstergröße 0 wird abgelehnt."""
        with pytest.raises(InvalidConfigurationError):
            hamming_window(0)

    def test_time_bins(self):
        """Zeitachse in Sekunden."""
        bins = compute_time_bins(np.zeros(4), 2)
        np.testing.assert_allclose(bins, [0.0, 0.5, 1.0, 1.5])
