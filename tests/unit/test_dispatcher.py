"""Unit tests for alert dispatch gating and delivery reporting."""

import asyncio
import logging

import pytest

from cyclist_alert.alerts import AlertDispatcher, DeliveryStatus
from cyclist_alert.alerts.dispatcher import log_notification
from cyclist_alert.detectors import FallEvent
from cyclist_alert.location import LocationTracker
from cyclist_alert.preferences import EmergencyContact

EVENT = FallEvent(timestamp_ms=1000, peak_magnitude=31.2, fall_threshold=25.0)


@pytest.fixture
def tracker():
    tracker = LocationTracker()
    tracker.update(-12.0464, -77.0428, 900)
    return tracker


def make_dispatcher(client, tracker, contact, **kwargs):
    notifications = []
    dispatcher = AlertDispatcher(
        client=client,
        location=tracker,
        contact_provider=lambda: contact,
        notify=notifications.append,
        **kwargs,
    )
    return dispatcher, notifications


class TestGating:
    def test_no_contact(self, fake_client, tracker):
        dispatcher, notes = make_dispatcher(fake_client, tracker, None)

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert not result.success
        assert fake_client.sent == []
        assert notes == ["FALL DETECTED but no emergency contact is configured!"]

    def test_blank_number_counts_as_no_contact(self, fake_client, tracker):
        dispatcher, notes = make_dispatcher(fake_client, tracker, EmergencyContact("Ana", "   "))

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert not result.success
        assert fake_client.sent == []
        assert notes == ["FALL DETECTED but no emergency contact is configured!"]

    def test_sms_disabled(self, fake_client, tracker):
        dispatcher, notes = make_dispatcher(
            fake_client, tracker, EmergencyContact("Ana", "987654321"), sms_enabled=False
        )

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert not result.success
        assert fake_client.sent == []
        assert notes == ["Cannot send SMS: permission denied"]

    def test_invalid_number(self, fake_client, tracker):
        dispatcher, notes = make_dispatcher(
            fake_client, tracker, EmergencyContact("Ana", "12-34")
        )

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert not result.success
        assert "Invalid phone number" in result.error
        assert notes == ["Invalid phone number: 1234"]


class TestDelivery:
    def test_sends_to_normalized_number(self, fake_client, tracker):
        dispatcher, notes = make_dispatcher(
            fake_client, tracker, EmergencyContact("Ana", "987 654 321")
        )

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert result.success
        assert result.status is DeliveryStatus.SENT
        assert result.event is EVENT
        assert (result.latitude, result.longitude) == (-12.0464, -77.0428)
        assert "+51987654321" in result.action

        [(number, parts)] = fake_client.sent
        assert number == "+51987654321"
        assert "q=-12.0464,-77.0428" in "".join(parts)
        assert notes == ["SMS alert sent.", "FALL DETECTED! Alert sent to contact"]

    def test_unknown_location_sends_zeroes(self, fake_client):
        dispatcher, _ = make_dispatcher(
            fake_client, LocationTracker(), EmergencyContact("Ana", "987654321")
        )

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert result.success
        assert (result.latitude, result.longitude) == (0.0, 0.0)
        assert "q=0.0,0.0" in "".join(fake_client.sent[0][1])

    def test_failed_delivery_reported(self, make_client, tracker):
        client = make_client(DeliveryStatus.NO_SERVICE)
        dispatcher, notes = make_dispatcher(client, tracker, EmergencyContact("Ana", "987654321"))

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert not result.success
        assert result.status is DeliveryStatus.NO_SERVICE
        assert notes == ["No service available to send SMS."]

    def test_dry_run_does_not_send(self, fake_client, tracker):
        dispatcher, notes = make_dispatcher(
            fake_client, tracker, EmergencyContact("Ana", "987654321"), dry_run=True
        )

        result = asyncio.run(dispatcher.dispatch(EVENT))

        assert result.success
        assert fake_client.sent == []
        assert notes == []

    def test_contact_resolved_per_event(self, fake_client, tracker):
        contacts = [None, EmergencyContact("Ana", "987654321")]
        dispatcher = AlertDispatcher(
            client=fake_client,
            location=tracker,
            contact_provider=lambda: contacts[0],
            notify=lambda message: None,
        )

        first = asyncio.run(dispatcher.dispatch(EVENT))
        contacts.pop(0)
        second = asyncio.run(dispatcher.dispatch(EVENT))

        assert not first.success
        assert second.success
        assert len(fake_client.sent) == 1


class TestLogNotification:
    def test_default_notification_is_a_warning_log(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cyclist_alert.alerts.dispatcher"):
            log_notification("SMS alert sent.")

        assert "NOTIFY | SMS alert sent." in caplog.messages
