import logging
import math
import threading
from dataclasses import dataclass, replace

from ..sensors.ring_buffer import MagnitudeBuffer
from ..utils.constants import DEFAULT_FALL_CLASSIFIER_CONFIG, SensitivityLimits
from .types import AccelerationSample, FallEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassifierConfig:
    """
    Immutable classifier configuration snapshot.

    Only ``fall_threshold`` changes at runtime, and only by swapping in a
    whole new snapshot (see ``FallClassifier.adjust_sensitivity``).
    """

    fall_threshold: float = DEFAULT_FALL_CLASSIFIER_CONFIG["fall_threshold"]
    low_threshold: float = DEFAULT_FALL_CLASSIFIER_CONFIG["low_threshold"]
    min_interval_ms: int = DEFAULT_FALL_CLASSIFIER_CONFIG["min_interval_ms"]
    gravity: float = DEFAULT_FALL_CLASSIFIER_CONFIG["gravity"]
    buffer_capacity: int = DEFAULT_FALL_CLASSIFIER_CONFIG["buffer_capacity"]
    min_samples_to_evaluate: int = DEFAULT_FALL_CLASSIFIER_CONFIG["min_samples_to_evaluate"]
    stillness_window: int = DEFAULT_FALL_CLASSIFIER_CONFIG["stillness_window"]
    base_threshold: float = DEFAULT_FALL_CLASSIFIER_CONFIG["base_threshold"]
    threshold_floor: float = DEFAULT_FALL_CLASSIFIER_CONFIG["threshold_floor"]


def sensitivity_to_threshold(
    factor: float,
    base_threshold: float = SensitivityLimits.BASE_THRESHOLD,
    floor: float = SensitivityLimits.THRESHOLD_FLOOR,
) -> float:
    """
    Map a sensitivity factor to an impact threshold.

    Args:
        factor: Sensitivity multiplier, nominally in [0.0, 3.0]
        base_threshold: Threshold at factor 1.0
        floor: Lowest threshold ever returned

    Returns:
        Impact threshold in net-magnitude units
    """
    if factor < SensitivityLimits.LOW_FACTOR:
        threshold = base_threshold - SensitivityLimits.LOW_OFFSET
    elif factor > SensitivityLimits.HIGH_FACTOR:
        threshold = base_threshold + SensitivityLimits.HIGH_OFFSET
    else:
        threshold = base_threshold * factor

    if threshold < floor:
        threshold = floor

    return threshold


class FallClassifier:
    """
    Streaming accelerometer fall classifier.

    A fall is an impact followed by stillness. Each sample is reduced to its
    net magnitude (vector norm minus gravity) and pushed into a sliding
    window. An event fires when all of the following hold at one sample:

    1. Impact: any value in the window exceeds ``fall_threshold``
    2. Stillness: the last ``stillness_window`` values are all below ``low_threshold``
    3. Cooldown: more than ``min_interval_ms`` since the previous event

    The impact may sit anywhere in the window, so it can precede the
    stillness run by a few samples. Firing clears the window.

    Comparisons are plain IEEE: a NaN magnitude is never an impact and never
    still, +Inf is an impact. Out-of-order timestamps produce a negative
    delta, which never passes the cooldown check.

    All mutating calls are serialized by one lock, so samples may arrive on a
    sensor thread while the UI thread adjusts sensitivity or resets.
    """

    def __init__(self, config: ClassifierConfig | None = None):
        """
        Initialize classifier.

        Args:
            config: Configuration snapshot. Uses defaults if not provided.
        """
        self._lock = threading.Lock()
        self._config = config or ClassifierConfig()
        self._buffer = MagnitudeBuffer(self._config.buffer_capacity)
        self._last_event_ms: int | None = None

        logger.info("FallClassifier initialized")
        logger.info(f"  Fall threshold: {self._config.fall_threshold}")
        logger.info(f"  Low threshold: {self._config.low_threshold}")
        logger.info(f"  Min interval: {self._config.min_interval_ms}ms")

    @property
    def config(self) -> ClassifierConfig:
        return self._config

    @property
    def fall_threshold(self) -> float:
        return self._config.fall_threshold

    @property
    def last_event_timestamp(self) -> int | None:
        """Timestamp of the last event, or None if none has fired."""
        return self._last_event_ms

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    @property
    def samples_seen(self) -> int:
        """Samples observed since creation. Not cleared by firing or reset()."""
        return self._buffer.total_appended

    def net_magnitude(self, sample: AccelerationSample) -> float:
        """
        Vector norm of the sample with static gravity removed.

        Args:
            sample: Raw accelerometer reading

        Returns:
            |sqrt(x² + y² + z²) - gravity|
        """
        # x ** 2 raises OverflowError on huge floats, x * x saturates to inf
        magnitude = math.sqrt(sample.x * sample.x + sample.y * sample.y + sample.z * sample.z)
        return abs(magnitude - self._config.gravity)

    def observe(self, sample: AccelerationSample) -> FallEvent | None:
        """
        Process one sample.

        Args:
            sample: Accelerometer reading, in non-decreasing timestamp order

        Returns:
            FallEvent if a fall is detected at this sample, otherwise None
        """
        with self._lock:
            cfg = self._config
            self._buffer.append(self.net_magnitude(sample))

            # Need sufficient history
            if len(self._buffer) < cfg.min_samples_to_evaluate:
                return None

            has_high_peak = self._buffer.any_above(cfg.fall_threshold)
            has_low_period = self._buffer.all_below(cfg.low_threshold, cfg.stillness_window)

            if self._last_event_ms is None:
                time_interval_ok = True
            else:
                time_interval_ok = (sample.timestamp_ms - self._last_event_ms) > cfg.min_interval_ms

            if not (has_high_peak and has_low_period):
                return None

            if not time_interval_ok:
                logger.debug(
                    f"Fall pattern at {sample.timestamp_ms} suppressed by cooldown "
                    f"(last event at {self._last_event_ms})"
                )
                return None

            event = FallEvent(
                timestamp_ms=sample.timestamp_ms,
                peak_magnitude=self._buffer.peak(),
                fall_threshold=cfg.fall_threshold,
            )
            self._last_event_ms = sample.timestamp_ms
            self._buffer.clear()

        logger.warning(
            f"Fall detected at {event.timestamp_ms} "
            f"(peak {event.peak_magnitude:.1f} > {event.fall_threshold:.1f})"
        )
        return event

    def adjust_sensitivity(self, factor: float) -> None:
        """
        Recompute the impact threshold from a sensitivity factor.

        A NaN factor is ignored and the current threshold kept.

        Args:
            factor: Sensitivity multiplier (lower is more sensitive below 0.5,
                    higher is less sensitive above 1.5)
        """
        if math.isnan(factor):
            logger.warning("Ignoring NaN sensitivity factor")
            return

        with self._lock:
            threshold = sensitivity_to_threshold(
                factor,
                base_threshold=self._config.base_threshold,
                floor=self._config.threshold_floor,
            )
            self._config = replace(self._config, fall_threshold=threshold)

        logger.info(f"Sensitivity {factor} -> fall threshold {threshold}")

    def reset(self) -> None:
        """Clear the sample window. The cooldown and configuration are kept."""
        with self._lock:
            self._buffer.clear()
        logger.info("Classifier window reset")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"FallClassifier("
            f"threshold={self._config.fall_threshold}, "
            f"buffer={len(self._buffer)}/{self._config.buffer_capacity}, "
            f"seen={self._buffer.total_appended}, "
            f"last_event={self._last_event_ms})"
        )
