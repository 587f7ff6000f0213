"""Fall detection from accelerometer samples."""

from .fall_classifier import ClassifierConfig, FallClassifier, sensitivity_to_threshold
from .types import AccelerationSample, FallEvent

__all__ = [
    "AccelerationSample",
    "ClassifierConfig",
    "FallClassifier",
    "FallEvent",
    "sensitivity_to_threshold",
]
