"""
Data types exchanged between the sample source, classifier and host.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AccelerationSample:
    """One accelerometer reading in m/s², timestamped in milliseconds."""

    timestamp_ms: int
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class FallEvent:
    """A detected fall, stamped with the sample that completed the stillness window."""

    timestamp_ms: int
    peak_magnitude: float
    fall_threshold: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and transport metadata."""
        return {
            "timestamp_ms": self.timestamp_ms,
            "peak_magnitude": round(self.peak_magnitude, 3),
            "fall_threshold": self.fall_threshold,
        }
