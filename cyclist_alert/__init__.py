"""
Cyclist Fall Alert System.

Watches a stream of accelerometer samples for a fall (impact followed by
stillness) and sends an SMS with the last known location to an emergency
contact:
- Streaming fall classifier
- SMS alert composition and delivery
- Detection session host
"""

from .alerts import AlertDispatcher, AlertResult, AsyncSmsClient, DeliveryStatus
from .detectors import (
    AccelerationSample,
    ClassifierConfig,
    FallClassifier,
    FallEvent,
    sensitivity_to_threshold,
)
from .host import CyclistAlertSystem
from .location import GeoPoint, LocationTracker
from .preferences import EmergencyContact, PreferencesStore
from .utils.constants import DEFAULT_FALL_CLASSIFIER_CONFIG

__version__ = "1.0.0"

__all__ = [
    "AccelerationSample",
    "ClassifierConfig",
    "FallClassifier",
    "FallEvent",
    "sensitivity_to_threshold",
    "AlertDispatcher",
    "AlertResult",
    "AsyncSmsClient",
    "DeliveryStatus",
    "CyclistAlertSystem",
    "GeoPoint",
    "LocationTracker",
    "EmergencyContact",
    "PreferencesStore",
    "DEFAULT_FALL_CLASSIFIER_CONFIG",
]
