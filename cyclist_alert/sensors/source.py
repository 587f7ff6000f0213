"""
Accelerometer sample sources.

The classifier does not care where samples come from. The host iterates a
source and feeds each sample to ``FallClassifier.observe``:

- QueueSampleSource: push-style feed for a platform sensor callback thread
- CsvSampleSource: replay of a recorded trace (timestamp_ms,x,y,z per row)
"""

import logging
import queue
import threading
from collections.abc import Iterator
from pathlib import Path

import numpy as np

from ..detectors.types import AccelerationSample

logger = logging.getLogger(__name__)


class SampleSource:
    """Base class: an iterable of AccelerationSample that can be closed."""

    def __iter__(self) -> Iterator[AccelerationSample]:
        raise NotImplementedError

    def close(self) -> None:
        """Stop delivering samples."""


class QueueSampleSource(SampleSource):
    """
    Thread-safe push source.

    A sensor callback calls ``push()`` from its own thread. The consumer
    iterates the source and blocks until a sample arrives or the source
    is closed. Samples pushed after ``close()`` are dropped.
    """

    def __init__(self, maxsize: int = 0, poll_interval: float = 0.5):
        """
        Args:
            maxsize: Queue bound (0 = unbounded)
            poll_interval: Seconds between checks of the closed flag while idle
        """
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()
        self.poll_interval = poll_interval
        self.dropped = 0

    def push(self, sample: AccelerationSample) -> bool:
        """
        Deliver a sample (non-blocking).

        Returns:
            True if queued, False if the source is closed or full
        """
        if self._closed.is_set():
            return False
        try:
            self._queue.put_nowait(sample)
            return True
        except queue.Full:
            self.dropped += 1
            logger.warning(f"Sample queue full, dropped sample at {sample.timestamp_ms}")
            return False

    def push_values(self, timestamp_ms: int, x: float, y: float, z: float) -> bool:
        """
        Convenience wrapper for raw sensor callbacks.

        Returns:
            False for a non-finite timestamp, otherwise as ``push()``
        """
        if not np.isfinite(timestamp_ms):
            logger.warning(f"Rejected sample with timestamp {timestamp_ms}")
            return False
        return self.push(AccelerationSample(int(timestamp_ms), float(x), float(y), float(z)))

    def close(self) -> None:
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def __iter__(self) -> Iterator[AccelerationSample]:
        while True:
            try:
                yield self._queue.get(timeout=self.poll_interval)
            except queue.Empty:
                if self._closed.is_set():
                    return
                continue


class CsvSampleSource(SampleSource):
    """
    Replays a recorded accelerometer trace.

    Expects a CSV with columns timestamp_ms,x,y,z. A header row is
    skipped if present.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._closed = False

        data = np.genfromtxt(self.path, delimiter=",", dtype=np.float64)
        data = np.atleast_2d(data)
        if data.size == 0:
            data = np.empty((0, 4))
        elif data.shape[1] != 4:
            raise ValueError(
                f"{self.path}: expected 4 columns (timestamp_ms,x,y,z), got {data.shape[1]}"
            )
        # A text header parses as a row of NaN
        if len(data) and np.all(np.isnan(data[0])):
            data = data[1:]

        self._rows = data
        logger.info(f"Loaded {len(self._rows)} samples from {self.path}")

    def __len__(self) -> int:
        return len(self._rows)

    def close(self) -> None:
        self._closed = True

    def __iter__(self) -> Iterator[AccelerationSample]:
        for ts, x, y, z in self._rows:
            if self._closed:
                return
            if not np.isfinite(ts):
                logger.warning(f"Skipping row with timestamp {ts}")
                continue
            yield AccelerationSample(int(ts), float(x), float(y), float(z))
