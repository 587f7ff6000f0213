"""
Emergency SMS composition: number cleanup, message text, segmentation.
"""

import re
from datetime import datetime

from ..utils.constants import (
    ALERT_TIME_FORMAT,
    LOCAL_MOBILE_LENGTH,
    LOCAL_MOBILE_PREFIX,
    MAPS_URL_TEMPLATE,
    MIN_PHONE_NUMBER_LENGTH,
    SMS_MULTIPART_LENGTH,
    SMS_SINGLE_PART_LENGTH,
)
from .errors import InvalidPhoneNumberError

_NON_DIALABLE = re.compile(r"[^\d+]")


def normalize_phone_number(number: str, country_code: str = "+51") -> str:
    """
    Clean a contact number for sending.

    Strips everything but digits and '+'. A bare 9-digit local mobile number
    starting with 9 gets the country code prepended.

    Args:
        number: Number as stored in the contact
        country_code: Prefix for local mobile numbers

    Returns:
        Dialable number

    Raises:
        InvalidPhoneNumberError: If fewer than 7 characters remain
    """
    clean = _NON_DIALABLE.sub("", number)
    if (
        not clean.startswith("+")
        and len(clean) == LOCAL_MOBILE_LENGTH
        and clean.startswith(LOCAL_MOBILE_PREFIX)
    ):
        clean = f"{country_code}{clean}"

    if len(clean) < MIN_PHONE_NUMBER_LENGTH:
        raise InvalidPhoneNumberError(clean)

    return clean


def maps_url(latitude: float, longitude: float) -> str:
    return MAPS_URL_TEMPLATE.format(lat=latitude, lon=longitude)


def compose_alert_message(
    latitude: float, longitude: float, when: datetime | None = None
) -> str:
    """
    Build the emergency alert text.

    Args:
        latitude: Last known latitude (0.0 when unknown)
        longitude: Last known longitude (0.0 when unknown)
        when: Alert time (defaults to now)

    Returns:
        Message body
    """
    when = when or datetime.now()
    lines = [
        "EMERGENCY ALERT - CYCLIST",
        "",
        "FALL DETECTED",
        "",
        "LOCATION:",
        f"Lat: {latitude}",
        f"Lon: {longitude}",
        "",
        f"Google Maps: {maps_url(latitude, longitude)}",
        "",
        f"Time: {when.strftime(ALERT_TIME_FORMAT)}",
        "",
        "Automatic alert sent by AlertCiclista",
    ]
    return "\n".join(lines)


def split_message(text: str) -> list[str]:
    """
    Divide a message into SMS parts.

    Fits in one part up to 160 characters. Longer text is split into
    153-character parts to leave room for the concatenation header.
    """
    if len(text) <= SMS_SINGLE_PART_LENGTH:
        return [text]
    return [
        text[i : i + SMS_MULTIPART_LENGTH]
        for i in range(0, len(text), SMS_MULTIPART_LENGTH)
    ]
