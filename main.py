#!/usr/bin/env python3
"""
Pulse Analyzer - entry point

Detects pulses in a capture, removes the background noise, writes the
cleaned capture, the individual pulses and a JSON side-car next to the
input. With a baseline capture, the frequencies where the capture is
louder than the baseline are listed.

Usage:
    python main.py capture.wav [baseline.wav] [pulse_width_samples]

Example:
    python main.py device.wav reference.wav 88200
"""

import sys
from pathlib import Path

DEFAULT_PULSE_WIDTH = 88200
COMPARISON_INTERVAL_HZ = 10.0
PEAK_COUNT = 5


def main():
    """Run the pulse workflow on the files given on the command line."""
    # Check Python version
    if sys.version_info < (3, 11):
        print("Error: Python 3.11 or higher is required.")
        print(f"Current version: {sys.version}")
        sys.exit(1)

    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    from pulse_analyzer.core import (
        SignalAnalyzer,
        SignalData,
        SignalError,
        SignalProcessor,
        load_audio,
        save_audio,
    )
    from pulse_analyzer.core.persistence import write_audio_data, write_signal_data
    from pulse_analyzer.utils import configure_logging, format_peak, samples_to_time_str

    configure_logging()

    capture_path = Path(sys.argv[1])
    baseline_path = Path(sys.argv[2]) if len(sys.argv) > 2 else None
    pulse_width = int(sys.argv[3]) if len(sys.argv) > 3 else DEFAULT_PULSE_WIDTH

    try:
        audio = load_audio(capture_path)
        data = SignalData.from_audio(audio)
        data.pulse_width = pulse_width

        # Compare before noise reduction replaces the signal
        if baseline_path is not None:
            analyzer = SignalAnalyzer(SignalData.from_audio(audio))
            baseline = SignalData.from_audio(load_audio(baseline_path))
            peaks = analyzer.compare_characteristic_frequencies(
                baseline, COMPARISON_INTERVAL_HZ, PEAK_COUNT
            )
            print(f"Characteristic frequencies vs. {baseline_path.name}:")
            for peak in peaks:
                print(f"  {format_peak(peak)}")

        processor = SignalProcessor(data)
        result = processor.detect_pulses()
        print(f"Pulses detected: {result.pulse_count}")
        for start in result.pulse_start_indices:
            print(f"  {samples_to_time_str(int(start), data.sample_rate)}")

        processor.reduce_noise()
    except (FileNotFoundError, SignalError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    output_dir = capture_path.parent
    stem = capture_path.stem

    cleaned_path = save_audio(
        data.time_domain_signal, output_dir / f"{stem}_cleaned", data.sample_rate, processor.bit_depth
    )
    pulse_paths = processor.save_pulses(output_dir / f"{stem}_pulses", stem)

    sidecar = output_dir / f"{stem}.json"
    write_audio_data(sidecar, audio)
    write_signal_data(sidecar, data)

    print(f"Cleaned capture: {cleaned_path}")
    print(f"Pulse files: {len(pulse_paths)}")
    print(f"Side-car: {sidecar}")


if __name__ == "__main__":
    main()
