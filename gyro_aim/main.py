#!/usr/bin/env python3
"""Replay a controller sensor session through the orientation tracker.

Reads gyro, accelerometer and recentre events from a recording (or a
synthetic controller with ``--mock``) and prints JSON-formatted aim
states to stdout.
"""

import argparse
import json
import logging
import sys
from typing import Iterable, Optional

from .communication import RecordingError, RecordingReader, SensorEvent, SyntheticController
from .communication.recording import ACCEL, GYRO, RECENTRE, write_recording
from .core import Config, SampleValidator, load_config
from .core.types import GyroSample
from .fusion import OrientationTracker
from .monitoring import StreamMonitor

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: If True, set DEBUG level; otherwise INFO.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def replay(
    events: Iterable[SensorEvent],
    config: Config,
    emit_every: int = 10,
    out=None,
) -> OrientationTracker:
    """Feed events into a new tracker, printing states as it goes.

    Args:
        events: Sensor events in time order.
        config: System configuration.
        emit_every: Print a state every N gyro samples, 0 for final only.
        out: Output stream, stdout by default.

    Returns:
        The tracker after the last event.
    """
    out = out if out is not None else sys.stdout

    tracker = OrientationTracker(config)
    validator = SampleValidator(config)
    monitor = StreamMonitor(config)

    rejected = 0
    gyro_count = 0

    for event in events:
        if event.kind == RECENTRE:
            tracker.recentre()
            continue

        sample = event.to_sample()
        if isinstance(sample, GyroSample):
            validation = validator.validate_gyro(sample)
        else:
            validation = validator.validate_accel(sample)

        if not validation.is_valid:
            rejected += 1
            for error in validation.errors:
                logger.warning("Rejected %s sample at %d: %s", event.kind, event.timestamp_ns, error)
            continue

        for warning in validation.warnings:
            logger.debug("Validation warning: %s", warning)

        monitor.record(event.kind, event.timestamp_ns)

        if event.kind == GYRO:
            tracker.push_gyro_sample(sample)
            gyro_count += 1
            if emit_every and gyro_count % emit_every == 0:
                print(json.dumps(tracker.state.to_dict()), file=out, flush=True)
        elif event.kind == ACCEL:
            tracker.push_accel_sample(sample)

    print(json.dumps(tracker.state.to_dict()), file=out, flush=True)

    stats = tracker.stats
    logger.info("Final statistics:")
    logger.info("  Gyro samples: %d (%d gaps)", stats.gyro_samples, stats.gyro_discontinuities)
    logger.info("  Accel samples: %d (%d gaps, %d skipped corrections)",
                stats.accel_samples, stats.accel_discontinuities, stats.skipped_corrections)
    logger.info("  Recentres: %d", stats.recentres)
    logger.info("  Rejected samples: %d", rejected)
    for key, value in monitor.to_dict().items():
        logger.debug("  %s: %s", key, value)

    return tracker


def main(argv: Optional[list] = None) -> int:
    """Application entry point.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        description="Replay controller gyro/accelerometer data through the aim tracker"
    )
    parser.add_argument(
        "recording",
        nargs="?",
        default=None,
        help="Recording CSV (kind,timestamp_ns,x,y,z)",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use a synthetic controller turning at --rate rad/s about Y",
    )
    parser.add_argument(
        "--rate",
        type=float,
        default=1.5708,
        help="Yaw rate of the synthetic controller in rad/s",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=1.0,
        help="Length of the synthetic session in seconds",
    )
    parser.add_argument(
        "--save",
        type=str,
        default=None,
        help="Write the synthetic session to this recording file",
    )
    parser.add_argument(
        "--emit-every",
        type=int,
        default=10,
        help="Print a state every N gyro samples (0 = final state only)",
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.recording is None and not args.mock:
        parser.error("a recording file or --mock is required")

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Failed to load configuration: %s", e)
        return 1

    try:
        if args.mock:
            controller = SyntheticController(angular_velocity=(0.0, args.rate, 0.0))
            events = list(controller.events(args.duration))
            if args.save:
                write_recording(args.save, events)
            replay(events, config, emit_every=args.emit_every)
        else:
            with RecordingReader(args.recording) as reader:
                replay(reader.events(), config, emit_every=args.emit_every)
    except RecordingError as e:
        logger.error("Recording error: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")

    return 0


if __name__ == "__main__":
    sys.exit(main())
