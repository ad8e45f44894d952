"""
Console tuner: print the detected note whenever it changes.

Opens the default (or given) input device, runs one detection cycle per tick
and prints every published pitch estimate.

Usage:
    python scripts/live_tuner.py
    python scripts/live_tuner.py --device 2 --min-freq 60 --max-freq 700
    python scripts/live_tuner.py --list-devices
"""

import argparse
import logging
import time

from autocorr_tuner import (
    AudioSourceUnavailableError,
    DetectionConfig,
    MicrophoneSource,
    PitchDetector,
    PitchEstimate,
    list_input_devices,
)
from autocorr_tuner.constants import BUFFER_SIZE, MAX_FREQUENCY, MIN_FREQUENCY, SAMPLE_RATE


def on_pitch_changed(pitch: PitchEstimate) -> None:
    """Print the new pitch."""
    if pitch.is_valid:
        print(f"{pitch.note} {pitch.cents_offset:+.0f} cents ({pitch.frequency:.2f} Hz)")
    else:
        print("No pitch detected")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--device", default=None, help="Input device id or name")
    parser.add_argument("--list-devices", action="store_true", help="List input devices and exit")
    parser.add_argument("--sample-rate", type=float, default=SAMPLE_RATE)
    parser.add_argument("--buffer-size", type=int, default=BUFFER_SIZE)
    parser.add_argument("--min-freq", type=float, default=MIN_FREQUENCY)
    parser.add_argument("--max-freq", type=float, default=MAX_FREQUENCY)
    parser.add_argument("--noise-threshold", type=float, default=0.05)
    parser.add_argument("--every", action="store_true", help="Print every estimate, not only changes")
    parser.add_argument("--rate", type=float, default=30.0, help="Detection ticks per second")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_devices:
        for device in list_input_devices():
            print(f"{device['index']:3d}  {device['name']}")
        return 0

    config = DetectionConfig(
        window_length=args.buffer_size,
        sample_rate=args.sample_rate,
        min_frequency=args.min_freq,
        max_frequency=args.max_freq,
        noise_threshold=args.noise_threshold,
        suppress_change_filtering=args.every,
    )
    detector = PitchDetector(config)
    detector.connect(on_pitch_changed)

    device = int(args.device) if args.device is not None and args.device.isdigit() else args.device
    source = MicrophoneSource(
        device=device,
        sample_rate=args.sample_rate,
        capacity=args.buffer_size * 4,
    )

    try:
        with source:
            print("Listening... (Ctrl+C to stop)")
            while True:
                detector.tick(source)
                time.sleep(1.0 / args.rate)
    except AudioSourceUnavailableError as e:
        print(f"Audio error: {e}")
        return 1
    except KeyboardInterrupt:
        print()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
