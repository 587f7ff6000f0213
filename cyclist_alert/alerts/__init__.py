"""
Emergency alerting: message composition, SMS transport and dispatch.
"""

from .client import AsyncSmsClient, DeliveryStatus, SendResult
from .dispatcher import AlertDispatcher, AlertResult
from .errors import AlertError, InvalidPhoneNumberError, NoContactError, SmsPermissionError
from .message import compose_alert_message, normalize_phone_number, split_message

__all__ = [
    "AsyncSmsClient",
    "DeliveryStatus",
    "SendResult",
    "AlertDispatcher",
    "AlertResult",
    "AlertError",
    "InvalidPhoneNumberError",
    "NoContactError",
    "SmsPermissionError",
    "compose_alert_message",
    "normalize_phone_number",
    "split_message",
]
