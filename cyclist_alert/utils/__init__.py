"""
Utility modules for the cyclist fall alert system.
"""

from .constants import (
    DEFAULT_FALL_CLASSIFIER_CONFIG,
    GRAVITY,
    UNKNOWN_LOCATION,
    SensitivityLimits,
)

__all__ = [
    "DEFAULT_FALL_CLASSIFIER_CONFIG",
    "GRAVITY",
    "UNKNOWN_LOCATION",
    "SensitivityLimits",
]
