"""
Async SMS gateway client for emergency alerts.
Sends each message part as a JSON POST and reports a delivery status per message.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

import aiohttp

logger = logging.getLogger(__name__)


class DeliveryStatus(Enum):
    """Outcome of an SMS send, as reported back to the user."""

    SENT = "sent"
    GENERIC_FAILURE = "generic_failure"
    NO_SERVICE = "no_service"
    NULL_PDU = "null_pdu"
    RADIO_OFF = "radio_off"
    UNKNOWN = "unknown"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_gateway(cls, value: str | None) -> "DeliveryStatus":
        """Map a gateway status string, defaulting to UNKNOWN."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


_DESCRIPTIONS = {
    DeliveryStatus.SENT: "SMS alert sent.",
    DeliveryStatus.GENERIC_FAILURE: "Generic failure sending SMS.",
    DeliveryStatus.NO_SERVICE: "No service available to send SMS.",
    DeliveryStatus.NULL_PDU: "Empty message part, SMS not sent.",
    DeliveryStatus.RADIO_OFF: "Radio off, SMS cannot be sent.",
    DeliveryStatus.UNKNOWN: "Unknown error sending SMS.",
}

# Worth another attempt
_TRANSIENT = {DeliveryStatus.NO_SERVICE, DeliveryStatus.RADIO_OFF}


@dataclass
class SendResult:
    status: DeliveryStatus
    parts_sent: int
    parts_total: int
    attempts: int
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.status is DeliveryStatus.SENT


class AsyncSmsClient:
    """
    Non-blocking SMS gateway client with retry logic.

    Each message part is posted as JSON::

        {"to": "+51987654321", "body": "...", "sender": "AlertCiclista",
         "part": 1, "parts": 2}

    A 2xx response counts as sent unless its JSON body carries a
    ``status`` field naming a failure. Network errors and 5xx responses are
    retried with backoff; 4xx responses are not.
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str | None = None,
        sender_id: str = "AlertCiclista",
        timeout: int = 30,
        retry_attempts: int = 3,
        retry_delays: tuple[float, ...] = (1, 2, 4),
    ):
        """
        Initialize SMS client.

        Args:
            endpoint: Gateway URL accepting JSON POSTs
            api_key: Optional bearer token
            sender_id: Sender name shown to the recipient where supported
            timeout: Request timeout in seconds
            retry_attempts: Attempts per message part
            retry_delays: Delay in seconds between retries (exponential backoff)
        """
        self.endpoint = endpoint
        self.api_key = api_key
        self.sender_id = sender_id
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delays = retry_delays or (0,)

        # Session will be created when needed (in async context)
        self._session: aiohttp.ClientSession | None = None

        logger.info(
            f"Initialized SMS client: timeout={timeout}s, retries={self.retry_attempts}"
        )

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self):
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.info("SMS client session closed")

    def _get_headers(self) -> dict[str, str]:
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def send_sms(self, number: str, parts: list[str]) -> SendResult:
        """
        Send a (possibly multipart) SMS.

        Parts are sent in order; the first part that cannot be delivered
        stops the send.

        Args:
            number: Normalized destination number
            parts: Message parts from ``split_message``

        Returns:
            SendResult with the status of the whole message
        """
        total = len(parts)
        if not self.endpoint:
            logger.warning("SMS gateway not configured, skipping send")
            return SendResult(
                DeliveryStatus.GENERIC_FAILURE, 0, total, 0, "SMS gateway not configured"
            )

        if total == 0 or any(not part for part in parts):
            logger.error("Refusing to send empty SMS part")
            return SendResult(DeliveryStatus.NULL_PDU, 0, total, 0, "empty message part")

        attempts = 0
        for index, body in enumerate(parts, start=1):
            payload = {
                "to": number,
                "body": body,
                "sender": self.sender_id,
                "part": index,
                "parts": total,
            }
            status, used, error = await self._post_with_retry(payload)
            attempts += used
            if status is not DeliveryStatus.SENT:
                logger.error(f"SMS part {index}/{total} failed: {status.description}")
                return SendResult(status, index - 1, total, attempts, error)

        logger.info(f"SMS delivered to gateway ({total} part(s))")
        return SendResult(DeliveryStatus.SENT, total, total, attempts)

    async def _post_with_retry(
        self, payload: dict
    ) -> tuple[DeliveryStatus, int, str | None]:
        session = await self._get_session()
        status = DeliveryStatus.UNKNOWN
        error: str | None = None

        for attempt in range(self.retry_attempts):
            try:
                logger.info(
                    f"Sending SMS part {payload['part']}/{payload['parts']} "
                    f"(attempt {attempt + 1}/{self.retry_attempts})"
                )
                async with session.post(
                    self.endpoint, json=payload, headers=self._get_headers()
                ) as response:
                    if 200 <= response.status < 300:
                        status = await self._status_from_body(response)
                        error = None if status is DeliveryStatus.SENT else status.value
                    else:
                        error_text = await response.text()
                        error = f"HTTP {response.status}: {error_text[:200]}"
                        logger.error(f"Gateway rejected SMS with status {response.status}")
                        if response.status < 500:
                            return DeliveryStatus.GENERIC_FAILURE, attempt + 1, error
                        if response.status == 503:
                            status = DeliveryStatus.NO_SERVICE
                        else:
                            status = DeliveryStatus.GENERIC_FAILURE

            except TimeoutError:
                logger.warning(f"SMS gateway timeout (attempt {attempt + 1})")
                status, error = DeliveryStatus.NO_SERVICE, "timeout"

            except aiohttp.ClientError as e:
                logger.warning(f"Network error sending SMS (attempt {attempt + 1}): {e}")
                status, error = DeliveryStatus.NO_SERVICE, str(e)

            if status is DeliveryStatus.SENT:
                return status, attempt + 1, None

            if status not in _TRANSIENT and status is not DeliveryStatus.GENERIC_FAILURE:
                # Gateway gave a definite answer
                return status, attempt + 1, error

            # Wait before retry (except on last attempt)
            if attempt < self.retry_attempts - 1:
                delay = (
                    self.retry_delays[attempt]
                    if attempt < len(self.retry_delays)
                    else self.retry_delays[-1]
                )
                logger.info(f"Retrying in {delay} seconds...")
                await asyncio.sleep(delay)

        logger.error(f"Failed to send SMS after {self.retry_attempts} attempts")
        return status, self.retry_attempts, error

    @staticmethod
    async def _status_from_body(response: aiohttp.ClientResponse) -> DeliveryStatus:
        try:
            body = await response.json(content_type=None)
        except ValueError:
            body = None
        if isinstance(body, dict) and "status" in body:
            return DeliveryStatus.from_gateway(body["status"])
        return DeliveryStatus.SENT

    def __repr__(self) -> str:
        """String representation of SMS client."""
        return (
            f"AsyncSmsClient("
            f"endpoint={bool(self.endpoint)}, "
            f"retries={self.retry_attempts})"
        )
