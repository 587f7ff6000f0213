"""Shared fixtures for the cyclist fall alert tests."""

import os
import sys

import pytest

# Add repository root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from cyclist_alert.alerts.client import DeliveryStatus, SendResult
from cyclist_alert.config.settings import Settings
from cyclist_alert.detectors.types import AccelerationSample
from cyclist_alert.utils.constants import GRAVITY


def net_sample(timestamp_ms: int, net: float) -> AccelerationSample:
    """Sample whose net magnitude (norm minus gravity) is ``net``."""
    return AccelerationSample(timestamp_ms, 0.0, 0.0, GRAVITY + net)


class FakeSmsClient:
    """Records sends instead of talking to a gateway."""

    def __init__(self, status: DeliveryStatus = DeliveryStatus.SENT):
        self.status = status
        self.sent: list[tuple[str, list[str]]] = []
        self.closed = 0

    async def send_sms(self, number, parts):
        self.sent.append((number, list(parts)))
        n = len(parts) if self.status is DeliveryStatus.SENT else 0
        return SendResult(self.status, n, len(parts), 1)

    async def close(self):
        self.closed += 1


@pytest.fixture
def fake_client():
    return FakeSmsClient()


@pytest.fixture
def settings(monkeypatch, tmp_path):
    """Settings isolated from the developer's environment."""
    for name in (
        "FALL_SENSITIVITY",
        "LOW_THRESHOLD",
        "MIN_INTERVAL_MS",
        "CONTACT_NAME",
        "CONTACT_NUMBER",
        "SMS_ENABLED",
        "SMS_GATEWAY_URL",
        "API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("PREFERENCES_PATH", str(tmp_path / "prefs.json"))
    return Settings()


@pytest.fixture
def sample_at():
    return net_sample


@pytest.fixture
def make_client():
    return FakeSmsClient
