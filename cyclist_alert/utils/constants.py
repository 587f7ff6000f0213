"""
Constants and default configurations for the cyclist fall alert system.
"""

# Physical constants
GRAVITY = 9.81  # m/s², Earth's gravitational acceleration


# Impact threshold tuning
class SensitivityLimits:
    """Sensitivity factor breakpoints and threshold offsets."""

    BASE_THRESHOLD = 25.0  # net magnitude at factor 1.0
    THRESHOLD_FLOOR = 10.0  # never trigger on anything softer than this
    LOW_FACTOR = 0.5  # below this: base - LOW_OFFSET
    HIGH_FACTOR = 1.5  # above this: base + HIGH_OFFSET
    LOW_OFFSET = 5.0
    HIGH_OFFSET = 10.0


# Default Configuration for the fall classifier
DEFAULT_FALL_CLASSIFIER_CONFIG = {
    "fall_threshold": SensitivityLimits.BASE_THRESHOLD,
    "low_threshold": 2.0,  # post-impact stillness
    "min_interval_ms": 5000,  # refractory period between events
    "gravity": GRAVITY,
    "buffer_capacity": 10,  # samples
    "min_samples_to_evaluate": 5,  # samples
    "stillness_window": 3,  # samples
    "base_threshold": SensitivityLimits.BASE_THRESHOLD,
    "threshold_floor": SensitivityLimits.THRESHOLD_FLOOR,
}


# SMS segmentation (GSM 03.38)
SMS_SINGLE_PART_LENGTH = 160
SMS_MULTIPART_LENGTH = 153  # 7 characters reserved for the UDH


# Location used when no fix is available
UNKNOWN_LOCATION = (0.0, 0.0)

# Google Maps link template for alert messages
MAPS_URL_TEMPLATE = "https://maps.google.com/maps?q={lat},{lon}"

# Timestamp format shown in alert messages
ALERT_TIME_FORMAT = "%d/%m/%Y %H:%M:%S"

# Local mobile numbers (Peru) are 9 digits starting with 9
LOCAL_MOBILE_LENGTH = 9
LOCAL_MOBILE_PREFIX = "9"
MIN_PHONE_NUMBER_LENGTH = 7
