"""
Configuration management for the cyclist fall alert system.
Loads settings from environment variables with sensible defaults for a phone-class device.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from ..utils.constants import DEFAULT_FALL_CLASSIFIER_CONFIG

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class Settings:
    """
    Centralized configuration management.
    All settings can be overridden via environment variables.
    """

    def __init__(self):
        # Fall classifier settings
        self.FALL_SENSITIVITY: float = self._get_float("FALL_SENSITIVITY", 1.0)
        self.LOW_THRESHOLD: float = self._get_float(
            "LOW_THRESHOLD", DEFAULT_FALL_CLASSIFIER_CONFIG["low_threshold"]
        )
        self.MIN_INTERVAL_MS: int = self._get_int(
            "MIN_INTERVAL_MS", DEFAULT_FALL_CLASSIFIER_CONFIG["min_interval_ms"]
        )

        # Emergency contact (overridden by the saved contact in preferences)
        self.CONTACT_NAME: str = os.getenv("CONTACT_NAME", "")
        self.CONTACT_NUMBER: str = os.getenv("CONTACT_NUMBER", "")
        self.DEFAULT_COUNTRY_CODE: str = os.getenv("DEFAULT_COUNTRY_CODE", "+51")

        # SMS settings
        self.SMS_ENABLED: bool = os.getenv("SMS_ENABLED", "true").lower() == "true"
        self.SMS_GATEWAY_URL: str = os.getenv("SMS_GATEWAY_URL", "")
        self.SMS_SENDER_ID: str = os.getenv("SMS_SENDER_ID", "AlertCiclista")
        self.API_KEY: str = os.getenv("API_KEY", "")
        self.API_TIMEOUT: int = self._get_int("API_TIMEOUT", 30)  # seconds
        self.API_RETRY_ATTEMPTS: int = self._get_int("API_RETRY_ATTEMPTS", 3)
        self.API_RETRY_DELAYS: tuple[int, ...] = (1, 2, 4)  # exponential backoff

        # Paths
        self.PREFERENCES_PATH: Path = Path(
            os.getenv("PREFERENCES_PATH", "./data/preferences.json")
        )
        self.LOG_DIR: Path = Path(os.getenv("LOG_DIR", "./logs"))

        # Validate critical settings
        self._validate()

    def _get_float(self, name: str, default: float) -> float:
        raw = os.getenv(name)
        if raw is None or raw == "":
            return float(default)
        try:
            return float(raw)
        except ValueError:
            logger.warning(f"Invalid {name}: {raw}, using {default}")
            return float(default)

    def _get_int(self, name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or raw == "":
            return int(default)
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Invalid {name}: {raw}, using {default}")
            return int(default)

    def _validate(self):
        """Validate critical configuration settings."""
        if not self.SMS_GATEWAY_URL:
            logger.warning("SMS_GATEWAY_URL not set - fall alerts will not be delivered")

        if not self.CONTACT_NUMBER:
            logger.info("CONTACT_NUMBER not set - using saved contact if any")

        # Create directories if they don't exist
        self.LOG_DIR.mkdir(parents=True, exist_ok=True)

        # Validate numeric ranges
        if self.FALL_SENSITIVITY < 0:
            logger.warning(f"Invalid FALL_SENSITIVITY: {self.FALL_SENSITIVITY}, using 1.0")
            self.FALL_SENSITIVITY = 1.0

        if self.MIN_INTERVAL_MS < 0:
            default = DEFAULT_FALL_CLASSIFIER_CONFIG["min_interval_ms"]
            logger.warning(f"Invalid MIN_INTERVAL_MS: {self.MIN_INTERVAL_MS}, using {default}")
            self.MIN_INTERVAL_MS = default

        if self.API_RETRY_ATTEMPTS < 1:
            logger.warning(f"Invalid API_RETRY_ATTEMPTS: {self.API_RETRY_ATTEMPTS}, using 1")
            self.API_RETRY_ATTEMPTS = 1

        logger.info("Configuration validated successfully")

    def log_config(self):
        """Log current configuration (for debugging)."""
        logger.info("=" * 60)
        logger.info("Cyclist Fall Alert Configuration")
        logger.info("=" * 60)
        logger.info(f"Fall Sensitivity: {self.FALL_SENSITIVITY}")
        logger.info(f"Low Threshold: {self.LOW_THRESHOLD}")
        logger.info(f"Min Interval: {self.MIN_INTERVAL_MS}ms")
        logger.info(f"Contact: {self.CONTACT_NAME or 'NOT SET'}")
        logger.info(f"Default Country Code: {self.DEFAULT_COUNTRY_CODE}")
        logger.info(f"SMS Enabled: {self.SMS_ENABLED}")
        logger.info(f"SMS Gateway: {self.SMS_GATEWAY_URL or 'NOT SET'}")
        logger.info(f"API Timeout: {self.API_TIMEOUT}s ({self.API_RETRY_ATTEMPTS} attempts)")
        logger.info(f"Preferences: {self.PREFERENCES_PATH}")
        logger.info(f"Log Dir: {self.LOG_DIR}")
        logger.info("=" * 60)


# Singleton instance
_settings_instance = None


def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Returns:
        Settings instance with current configuration
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
