"""Recorded sensor sessions.

A recording is a CSV file with one event per row::

    # kind,timestamp_ns,x,y,z
    gyro,1000000,0.0,1.5708,0.0
    accel,1000000,0.0,9.81,0.0
    recentre,2000000

Blank lines and lines starting with ``#`` are ignored.
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, TextIO, Union

from ..core.types import AccelSample, GyroSample

logger = logging.getLogger(__name__)

GYRO = "gyro"
ACCEL = "accel"
RECENTRE = "recentre"
EVENT_KINDS = (GYRO, ACCEL, RECENTRE)


class RecordingError(Exception):
    """Raised for unreadable or malformed recordings."""
    pass


@dataclass(frozen=True)
class SensorEvent:
    """One event of a sensor session."""
    kind: str
    timestamp_ns: int
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def to_sample(self) -> Union[GyroSample, AccelSample, None]:
        """Convert to the matching sample type, None for a recentre."""
        if self.kind == GYRO:
            return GyroSample(timestamp_ns=self.timestamp_ns, gx=self.x, gy=self.y, gz=self.z)
        if self.kind == ACCEL:
            return AccelSample(timestamp_ns=self.timestamp_ns, ax=self.x, ay=self.y, az=self.z)
        return None


def parse_row(row: List[str], line_number: int) -> SensorEvent:
    """Parse one CSV row.

    Args:
        row: Split CSV fields.
        line_number: Line in the file, for error messages.

    Returns:
        Parsed event.

    Raises:
        RecordingError: If the row is malformed.
    """
    fields = [f.strip() for f in row]
    kind = fields[0].lower()

    if kind not in EVENT_KINDS:
        raise RecordingError(f"Line {line_number}: unknown event kind '{fields[0]}'")

    expected = 2 if kind == RECENTRE else 5
    if len(fields) < expected:
        raise RecordingError(
            f"Line {line_number}: expected {expected} fields for {kind}, got {len(fields)}"
        )

    try:
        timestamp_ns = int(fields[1])
        if kind == RECENTRE:
            return SensorEvent(kind=kind, timestamp_ns=timestamp_ns)
        x, y, z = (float(v) for v in fields[2:5])
    except ValueError as e:
        raise RecordingError(f"Line {line_number}: {e}") from e

    return SensorEvent(kind=kind, timestamp_ns=timestamp_ns, x=x, y=y, z=z)


class RecordingReader:
    """Reads sensor events from a recording file."""

    def __init__(self, path: Union[str, Path]):
        """Initialize reader.

        Args:
            path: Path to the recording.
        """
        self._path = Path(path)
        self._file: Optional[TextIO] = None
        self._events_read = 0

    def open(self) -> None:
        """Open the recording.

        Raises:
            RecordingError: If the file cannot be opened.
        """
        try:
            self._file = open(self._path, "r", encoding="utf-8", newline="")
        except OSError as e:
            raise RecordingError(f"Cannot open recording {self._path}: {e}") from e
        logger.info("Recording opened: %s", self._path)

    def close(self) -> None:
        """Close the recording."""
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.info("Recording closed after %d events", self._events_read)

    def events(self) -> Iterator[SensorEvent]:
        """Iterate over the events in file order.

        Raises:
            RecordingError: If the reader is not open, the file cannot be
                decoded, or a row is malformed.
        """
        if self._file is None:
            raise RecordingError("Recording not open")

        reader = csv.reader(self._file)
        while True:
            try:
                row = next(reader)
            except StopIteration:
                return
            except (UnicodeDecodeError, csv.Error) as e:
                raise RecordingError(f"Line {reader.line_num + 1}: {e}") from e

            if not row or not row[0].strip() or row[0].lstrip().startswith("#"):
                continue
            event = parse_row(row, reader.line_num)
            self._events_read += 1
            yield event

    @property
    def events_read(self) -> int:
        return self._events_read

    def __enter__(self) -> "RecordingReader":
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


def write_recording(path: Union[str, Path], events) -> int:
    """Write events to a recording file.

    Args:
        path: Destination file, overwritten.
        events: Iterable of SensorEvent.

    Returns:
        Number of events written.
    """
    count = 0
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        f.write("# kind,timestamp_ns,x,y,z\n")
        for event in events:
            if event.kind == RECENTRE:
                writer.writerow([event.kind, event.timestamp_ns])
            else:
                writer.writerow([
                    event.kind,
                    event.timestamp_ns,
                    f"{event.x:.9f}",
                    f"{event.y:.9f}",
                    f"{event.z:.9f}",
                ])
            count += 1
    logger.info("Wrote %d events to %s", count, path)
    return count
