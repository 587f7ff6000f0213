"""
Last known GPS location.

Location updates arrive from the platform location callback; the alert
dispatcher reads the latest fix when a fall is detected.
"""

import logging
import threading
from dataclasses import dataclass

from .utils.constants import UNKNOWN_LOCATION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float
    timestamp_ms: int | None = None

    @property
    def is_unknown(self) -> bool:
        return (self.latitude, self.longitude) == UNKNOWN_LOCATION


UNKNOWN_POINT = GeoPoint(*UNKNOWN_LOCATION)


class LocationTracker:
    """Thread-safe holder for the most recent location fix."""

    def __init__(self, initial: GeoPoint | None = None):
        self._lock = threading.Lock()
        self._fix = initial
        self.updates = 0

    def update(self, latitude: float, longitude: float, timestamp_ms: int | None = None) -> GeoPoint:
        """Record a new fix and return it."""
        point = GeoPoint(float(latitude), float(longitude), timestamp_ms)
        with self._lock:
            self._fix = point
            self.updates += 1
        logger.debug(f"Location update: {point.latitude:.6f}, {point.longitude:.6f}")
        return point

    def current(self) -> GeoPoint:
        """Latest fix, or the 0.0/0.0 sentinel when none is known."""
        with self._lock:
            return self._fix if self._fix is not None else UNKNOWN_POINT

    @property
    def has_fix(self) -> bool:
        with self._lock:
            return self._fix is not None

    def __repr__(self) -> str:
        fix = self.current()
        return f"LocationTracker(lat={fix.latitude}, lon={fix.longitude}, updates={self.updates})"
