"""
Alert dispatch: turns a detected fall into an SMS to the emergency contact.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..detectors.types import FallEvent
from ..location import LocationTracker
from ..preferences import EmergencyContact
from .client import AsyncSmsClient, DeliveryStatus
from .errors import AlertError, NoContactError, SmsPermissionError
from .message import compose_alert_message, normalize_phone_number, split_message

logger = logging.getLogger(__name__)


def log_notification(message: str) -> None:
    """Default user notification: a log line."""
    logger.warning(f"NOTIFY | {message}")


@dataclass
class AlertResult:
    event: FallEvent
    success: bool
    action: str  # e.g. "SMS to Ana (+51987654321)"
    status: DeliveryStatus | None = None
    error: str | None = None
    latitude: float = 0.0
    longitude: float = 0.0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class AlertDispatcher:
    """
    Sends the emergency SMS for a detected fall.

    Usage
    -----
        dispatcher = AlertDispatcher(
            client=AsyncSmsClient("https://sms.example/send"),
            location=tracker,
            contact_provider=store.load_contact,
        )
        result = await dispatcher.dispatch(event)

    Gating happens here, not in the classifier: no contact, SMS disabled or a
    bad number each produce a failed AlertResult plus a user notification.
    Nothing is raised to the caller for these cases.

    Parameters
    ----------
    client : AsyncSmsClient
        Transport for the message.
    location : LocationTracker
        Source of the last known fix; 0.0/0.0 when there is none.
    contact_provider : callable
        Returns the current EmergencyContact or None. Called per event so a
        contact picked mid-session is used.
    sms_enabled : bool
        Whether the user granted SMS sending.
    country_code : str
        Prefix for bare local mobile numbers.
    notify : callable
        Receives user-facing messages.
    dry_run : bool
        Compose and log the message without sending it.
    """

    def __init__(
        self,
        client: AsyncSmsClient,
        location: LocationTracker,
        contact_provider: Callable[[], EmergencyContact | None],
        sms_enabled: bool = True,
        country_code: str = "+51",
        notify: Callable[[str], None] = log_notification,
        dry_run: bool = False,
    ):
        self.client = client
        self.location = location
        self.contact_provider = contact_provider
        self.sms_enabled = sms_enabled
        self.country_code = country_code
        self.notify = notify
        self.dry_run = dry_run

    async def dispatch(self, event: FallEvent) -> AlertResult:
        """
        Send the alert for one event.

        Parameters
        ----------
        event : FallEvent
            The detection to report. Each event should be dispatched once.

        Returns
        -------
        AlertResult
        """
        point = self.location.current()
        contact = self.contact_provider()
        action = f"SMS to {contact.name} ({contact.number})" if contact else "SMS"

        try:
            if contact is None or not contact.number.strip():
                raise NoContactError()
            if not self.sms_enabled:
                raise SmsPermissionError()
            number = normalize_phone_number(contact.number, self.country_code)
        except NoContactError as e:
            self.notify("FALL DETECTED but no emergency contact is configured!")
            return self._failed(event, action, str(e), point)
        except AlertError as e:
            self.notify(str(e))
            return self._failed(event, action, str(e), point)

        if point.is_unknown:
            logger.warning("No location fix available, sending 0.0/0.0")

        message = compose_alert_message(point.latitude, point.longitude)
        parts = split_message(message)

        logger.warning(
            f"ALERT TRIGGERED | contact={contact.name} | event={event.timestamp_ms} | "
            f"lat={point.latitude} | lon={point.longitude} | parts={len(parts)}"
        )

        if self.dry_run:
            logger.info(f"Dry run, message not sent:\n{message}")
            return AlertResult(
                event, True, action, DeliveryStatus.SENT, None, point.latitude, point.longitude
            )

        sent = await self.client.send_sms(number, parts)
        self.notify(sent.status.description)

        if sent.success:
            self.notify("FALL DETECTED! Alert sent to contact")

        return AlertResult(
            event=event,
            success=sent.success,
            action=f"SMS to {contact.name} ({number})",
            status=sent.status,
            error=sent.error,
            latitude=point.latitude,
            longitude=point.longitude,
        )

    @staticmethod
    def _failed(event, action, error, point) -> AlertResult:
        logger.error(f"Alert not sent: {error}")
        return AlertResult(
            event=event,
            success=False,
            action=action,
            error=error,
            latitude=point.latitude,
            longitude=point.longitude,
        )
