"""
Fixed-capacity ring buffer for net acceleration magnitudes.
Preallocates its storage so appending a sample never reallocates.
"""

import logging

import numpy as np
import numpy.typing as npt

logger = logging.getLogger(__name__)


class MagnitudeBuffer:
    """
    Sliding window over the most recent net-magnitude readings.

    Values live in a preallocated float array indexed by a write cursor.
    Once full, each append overwrites the oldest slot, so the buffer always
    holds the last ``capacity`` values in arrival order.

    Attributes:
        capacity: Maximum number of values retained
        total_appended: Values appended since creation, surviving clear()
    """

    def __init__(self, capacity: int = 10):
        """
        Initialize ring buffer.

        Args:
            capacity: Number of most recent values to retain (must be positive)
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self.capacity = capacity
        self._data: npt.NDArray[np.float64] = np.zeros(capacity, dtype=np.float64)
        self._cursor = 0  # next slot to write
        self._count = 0
        self.total_appended = 0

    def append(self, value: float) -> None:
        """
        Append a value, evicting the oldest one when the buffer is full.

        Args:
            value: Net magnitude reading
        """
        self._data[self._cursor] = value
        self._cursor = (self._cursor + 1) % self.capacity
        if self._count < self.capacity:
            self._count += 1
        self.total_appended += 1

    def clear(self) -> None:
        """Drop all values. Storage is kept for reuse."""
        self._cursor = 0
        self._count = 0

    def tail(self, n: int) -> npt.NDArray[np.float64]:
        """
        Get the ``n`` most recent values, oldest first.

        Returns fewer than ``n`` values when the buffer holds fewer.
        """
        n = max(0, min(n, self._count))
        if n == 0:
            return np.empty(0, dtype=np.float64)
        idx = (self._cursor - n + np.arange(n)) % self.capacity
        return self._data[idx]

    def any_above(self, threshold: float) -> bool:
        """True if any buffered value is strictly greater than ``threshold``."""
        if self._count == 0:
            return False
        with np.errstate(invalid="ignore"):
            return bool(np.any(self._active() > threshold))

    def all_below(self, threshold: float, window: int) -> bool:
        """
        True only if ``window`` recent values exist and all are below ``threshold``.

        NaN compares false, so a NaN inside the window breaks the run.
        """
        recent = self.tail(window)
        if len(recent) != window or window <= 0:
            return False
        with np.errstate(invalid="ignore"):
            return bool(np.all(recent < threshold))

    def peak(self) -> float:
        """Largest buffered value ignoring NaN, or 0.0 when there is none."""
        active = self._active()
        if active.size == 0 or np.all(np.isnan(active)):
            return 0.0
        return float(np.nanmax(active))

    def _active(self) -> npt.NDArray[np.float64]:
        # Slot order is irrelevant for reductions
        return self._data[: self._count]

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        """String representation."""
        return f"MagnitudeBuffer({self._count}/{self.capacity})"
