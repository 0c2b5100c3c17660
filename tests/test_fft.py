"""
Tests für FFT- und RFFT-Engines.
"""

import pytest
import numpy as np

from pulse_analyzer.core.exceptions import DimensionMismatchError, InvalidConfigurationError
from pulse_analyzer.core.fft import (
    FFTEngine,
    FFTVariant,
    RealFFTEngine,
    SpectralPeak,
    aggregate_by_bin_interval,
    compute_bin_width,
    create_engine,
    find_peaks,
    spectral_subtraction,
)


def _sine(freq, sr, n, amplitude=1.0):
    return amplitude * np.sin(2 * np.pi * freq * np.arange(n) / sr)


class TestFullFFT:
    """Tests für die komplexe Voll-FFT."""

    @pytest.mark.parametrize("n", [1, 2, 7, 64, 1000])
    def test_round_trip(self, n):
        """inverse(forward(x)) ≈ x für beliebige Längen."""
        data = np.random.randn(n)
        engine = FFTEngine(data, 8000)

        np.testing.assert_allclose(engine.inverse(engine.forward(data)), data, atol=1e-10)

    def test_spectrum_length(self):
        """Spektrum hat N Bins."""
        engine = FFTEngine(np.random.randn(100), 8000)

        assert len(engine.spectrum) == 100
        assert len(engine.frequency_bins()) == 100

    def test_frequency_bins(self):
        """Bin k liegt bei k * sr / N."""
        engine = FFTEngine(np.zeros(8), 8000)

        assert engine.frequency_resolution == 1000
        np.testing.assert_allclose(engine.frequency_bins(), np.arange(8) * 1000)

    def test_sine_peak(self):
        """Sinuston erscheint im richtigen Bin."""
        sr = 8000
        engine = FFTEngine(_sine(1000, sr, sr), sr)

        magnitude = np.abs(engine.spectrum[:sr // 2])
        assert engine.frequency_bins()[np.argmax(magnitude)] == 1000

    def test_empty_signal(self):
        """Leeres Signal wird abgelehnt."""
        with pytest.raises(InvalidConfigurationError):
            FFTEngine(np.zeros(0), 8000)

    def test_invalid_sample_rate(self):
        """Samplerate muss positiv sein."""
        with pytest.raises(InvalidConfigurationError):
            FFTEngine(np.zeros(8), 0)


class TestRealFFT:
    """Tests für die RFFT mit Halbspektrum."""

    @pytest.mark.parametrize("n", [2, 9, 64, 1001])
    def test_round_trip(self, n):
        """Round-Trip auch bei ungerader Länge."""
        data = np.random.randn(n)
        engine = RealFFTEngine(data, 8000)

        result = engine.inverse(engine.forward(data))

        assert len(result) == n
        np.testing.assert_allclose(result, data, atol=1e-10)

    def test_half_spectrum_length(self):
        """Halbspektrum hat N/2 + 1 Bins."""
        engine = RealFFTEngine(np.random.randn(100), 8000)

        assert len(engine.spectrum) == 51
        assert len(engine.frequency_bins()) == 51

    def test_resolution_formula(self):
        """Auflösung = sr / (2 * (M - 1)) mit M = N/2 + 1."""
        engine = RealFFTEngine(np.zeros(9), 8000)

        assert engine.bin_count == 5
        assert engine.frequency_resolution == pytest.approx(8000 / 8)

    def test_last_bin_at_nyquist(self):
        """Auflösung bezieht sich auf das Halbspektrum, nicht auf N - 1 Samples."""
        engine = RealFFTEngine(np.zeros(1000), 8000)

        assert engine.frequency_resolution != pytest.approx(8000 / (2 * 999))
        assert engine.frequency_bins()[-1] == pytest.approx(4000)

    def test_resolution_even_length(self):
        """Bei gerader Länge identisch mit sr / N."""
        engine = RealFFTEngine(np.zeros(8), 8000)

        assert engine.frequency_resolution == pytest.approx(1000)
        assert engine.frequency_bins()[-1] == pytest.approx(4000)

    def test_single_sample_rejected(self):
        """Ein Sample reicht nicht für die RFFT."""
        with pytest.raises(InvalidConfigurationError):
            RealFFTEngine(np.ones(1), 8000)

    def test_aggregate_wrong_length(self):
        """Falsche Magnitudenlänge wird erkannt."""
        engine = RealFFTEngine(np.zeros(8), 8000)

        with pytest.raises(DimensionMismatchError):
            engine.aggregate_by_bin_interval(np.ones(8), 2000)


class TestBinAggregation:
    """Tests für Frequenzbin-Zusammenfassung."""

    def test_bin_count(self):
        """N=8, sr=8000, 2000 Hz: Breite 2, 5 Ausgabebins."""
        engine = FFTEngine(np.zeros(8), 8000)

        assert engine.bin_width(2000) == 2
        bins, combined = engine.aggregate_by_bin_interval(np.ones(8), 2000)

        assert len(bins) == 5
        assert len(combined) == 5

    def test_averaging(self):
        """Magnituden werden gemittelt, Restbin ohne Quellbins ist 0."""
        magnitude = np.array([1, 3, 5, 7, 9, 11, 13, 15], dtype=float)

        bins, combined = aggregate_by_bin_interval(magnitude, 8000, 8, 2000)

        np.testing.assert_allclose(bins, [0, 2000, 4000, 6000, 8000])
        np.testing.assert_allclose(combined, [2, 6, 10, 14, 0])

    def test_partial_last_group(self):
        """Letzte unvollständige Gruppe wird über ihre eigene Länge gemittelt."""
        magnitude = np.array([2, 4, 6, 8, 10], dtype=float)

        _, combined = aggregate_by_bin_interval(magnitude, 5000, 5, 2000)

        np.testing.assert_allclose(combined, [3, 7, 10])

    def test_bin_width_rounds_half_up(self):
        """Halbe Verhältnisse werden aufgerundet."""
        assert compute_bin_width(2500, 1000) == 3
        assert compute_bin_width(3500, 1000) == 4
        assert compute_bin_width(2400, 1000) == 2

    def test_narrow_interval_clamped(self):
        """Intervall unter der Auflösung ergibt Breite 1."""
        assert compute_bin_width(400, 1000) == 1
        assert compute_bin_width(500, 1000) == 1
        assert compute_bin_width(0, 1000) == 1
        assert compute_bin_width(-10, 1000) == 1

    def test_bins_for_interval(self):
        """Frequenzachse passt zur Aggregation."""
        engine = FFTEngine(np.zeros(8), 8000)
        bins, _ = engine.aggregate_by_bin_interval(np.ones(8), 2000)

        np.testing.assert_allclose(engine.bins_for_interval(2000), bins)

    def test_real_bins_for_interval(self):
        """RFFT leitet die Anzahl aus dem Halbspektrum ab."""
        engine = RealFFTEngine(np.zeros(8), 8000)

        # 5 Halbspektrum-Bins, Breite 2 -> 5 // 2 + 1 = 3
        np.testing.assert_allclose(engine.bins_for_interval(2000), [0, 2000, 4000])


class TestFindPeaks:
    """Tests für die Extraktion charakteristischer Frequenzen."""

    def test_excludes_dc(self):
        """Bin bei 0 Hz wird nie gemeldet."""
        peaks = find_peaks(np.array([0, 100, 200]), np.array([99, 5, 3]), 2)

        assert [p.frequency_hz for p in peaks] == [100, 200]
        assert all(p.frequency_hz != 0 for p in peaks)

    def test_sorted_by_magnitude(self):
        """Stärkster Peak zuerst."""
        peaks = find_peaks(np.array([0, 1, 2, 3]), np.array([0, 1, 3, 2]), 3)

        assert peaks == [
            SpectralPeak(2.0, 3.0),
            SpectralPeak(3.0, 2.0),
            SpectralPeak(1.0, 1.0),
        ]

    def test_tie_break_lowest_frequency(self):
        """Gleiche Magnitude: niedrigere Frequenz zuerst."""
        peaks = find_peaks(np.array([0, 300, 100, 200]), np.array([0, 7, 7, 9]), 3)

        assert [p.frequency_hz for p in peaks] == [200, 100, 300]

    def test_frequency_range(self):
        """Nur Frequenzen im Bereich [min, max]."""
        bins = np.array([0, 100, 200, 300, 400])
        magnitudes = np.array([0, 9, 8, 7, 6])

        peaks = find_peaks(bins, magnitudes, 10, min_frequency=200, max_frequency=300)

        assert [p.frequency_hz for p in peaks] == [200, 300]

    def test_count_limits(self):
        """Weniger Kandidaten als angefordert, oder count 0."""
        bins = np.array([0, 100])
        magnitudes = np.array([1, 2])

        assert len(find_peaks(bins, magnitudes, 5)) == 1
        assert find_peaks(bins, magnitudes, 0) == []

    def test_length_mismatch(self):
        """Bins und Magnituden müssen gleich lang sein."""
        with pytest.raises(DimensionMismatchError):
            find_peaks(np.array([0, 1]), np.array([1.0]), 1)

    def test_characteristic_frequencies(self):
        """Aggregation plus Peak-Suche über die Engine."""
        sr = 8000
        engine = RealFFTEngine(_sine(1000, sr, sr), sr)
        magnitude = np.abs(engine.spectrum)

        peaks = engine.find_characteristic_frequencies(10, magnitude, 1)

        assert peaks[0].frequency_hz == pytest.approx(1000)


class TestSpectralSubtraction:
    """Tests für Spektralsubtraktion auf dem Gesamtspektrum."""

    def test_per_bin(self):
        """Breite 1: Skalierung pro Bin, Nullung bei stärkerem Rauschen."""
        spectrum = np.array([4, 1, 2, 2], dtype=complex)
        noise = np.array([1, 2, 3, 3], dtype=complex)

        result = spectral_subtraction(spectrum, noise, bin_width=1)

        np.testing.assert_allclose(result, [3, 0, 0, 0])

    def test_grouped(self):
        """Gruppen entscheiden über die Summe ihrer Bins."""
        spectrum = np.array([4, 1, 2, 2], dtype=complex)
        noise = np.array([1, 2, 3, 3], dtype=complex)

        result = spectral_subtraction(spectrum, noise, bin_width=2)

        # Gruppe 0: 1 - 3/5 = 0.4, Gruppe 1: Rauschen überwiegt
        np.testing.assert_allclose(result, [1.6, 0.4, 0, 0])

    def test_threshold(self):
        """Bins unter dem Schwellwert werden genullt."""
        spectrum = np.array([1.0, 1e-3], dtype=complex)

        result = spectral_subtraction(spectrum, np.zeros(2, dtype=complex), threshold=1e-2)

        np.testing.assert_allclose(result, [1.0, 0.0])

    def test_phase_preserved(self):
        """Skalierung erhält die Phase."""
        spectrum = np.array([2j, -2 + 0j])
        noise = np.array([1, 1], dtype=complex)

        result = spectral_subtraction(spectrum, noise)

        np.testing.assert_allclose(result, [1j, -1])

    def test_input_unchanged(self):
        """Eingangsspektrum wird nicht verändert."""
        spectrum = np.array([4, 1], dtype=complex)
        spectral_subtraction(spectrum, np.array([1, 2], dtype=complex))

        np.testing.assert_array_equal(spectrum, [4, 1])


class TestReduceNoise:
    """Tests für reduce_noise der Engines."""

    def test_noise_equal_signal(self):
        """Rauschen gleich Signal löscht alles."""
        data = _sine(440, 8000, 800)
        engine = FFTEngine(data, 8000)

        cleaned, spectrum = engine.reduce_noise(data)

        np.testing.assert_allclose(cleaned, 0, atol=1e-12)
        assert np.all(spectrum == 0)

    def test_half_amplitude_noise(self):
        """Rauschen mit halber Amplitude halbiert das Signal."""
        data = _sine(440, 8000, 800)
        engine = FFTEngine(2 * data, 8000)

        cleaned, _ = engine.reduce_noise(data)

        np.testing.assert_allclose(cleaned, data, atol=1e-9)

    def test_short_noise_is_tiled(self):
        """Kurzes Rauschsignal wird auf N gekachelt."""
        period = _sine(1000, 8000, 8)
        engine = FFTEngine(np.tile(period, 100), 8000)

        cleaned, _ = engine.reduce_noise(period)

        np.testing.assert_allclose(cleaned, 0, atol=1e-12)

    def test_grouped_interval(self):
        """Mit Intervall bleibt die Länge erhalten."""
        data = np.random.randn(800)
        engine = FFTEngine(data, 8000)

        cleaned, spectrum = engine.reduce_noise(0.1 * np.random.randn(800), interval_hz=100)

        assert len(cleaned) == 800
        assert len(spectrum) == 800

    def test_real_reduce_noise(self):
        """RFFT arbeitet pro Bin auf dem Halbspektrum."""
        data = _sine(440, 8000, 801)
        engine = RealFFTEngine(2 * data, 8000)

        cleaned, spectrum = engine.reduce_noise(data)

        assert len(spectrum) == 401
        np.testing.assert_allclose(cleaned, data, atol=1e-9)


class TestVariant:
    """Tests für die Variantenauswahl."""

    def test_create_full(self):
        engine = create_engine(np.zeros(8), 8000, FFTVariant.FULL)

        assert isinstance(engine, FFTEngine)
        assert engine.variant is FFTVariant.FULL

    def test_create_real(self):
        engine = create_engine(np.zeros(8), 8000, FFTVariant.REAL)

        assert isinstance(engine, RealFFTEngine)
        assert engine.variant is FFTVariant.REAL

    def test_default_is_full(self):
        assert isinstance(create_engine(np.zeros(8), 8000), FFTEngine)
