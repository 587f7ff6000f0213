"""
Persisted user preferences: emergency contact and last known location.

Stored as a small JSON document so the contact survives restarts and the
last location can seed the tracker before the first GPS fix.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .location import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmergencyContact:
    name: str  # display name shown to the user
    number: str  # phone number as picked, normalized only when sending


class PreferencesStore:
    """
    JSON-file preferences.

    A missing or unreadable file is treated as empty preferences. Writes
    replace the whole file.
    """

    def __init__(self, path: Path | str):
        """
        Args:
            path: Location of the JSON file (parent directory is created on save)
        """
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read preferences from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed preferences in {self.path}")
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def _update(self, **values: Any) -> None:
        with self._lock:
            data = self._read()
            data.update(values)
            self._write(data)

    def load_contact(self) -> EmergencyContact | None:
        """Saved emergency contact, or None if none is configured."""
        with self._lock:
            data = self._read()
        number = str(data.get("contact_number") or "").strip()
        if not number:
            return None
        return EmergencyContact(name=data.get("contact_name") or "Unknown", number=number)

    def save_contact(self, contact: EmergencyContact) -> None:
        self._update(contact_name=contact.name, contact_number=contact.number)
        logger.info(f"Emergency contact saved: {contact.name}")

    def save_location(self, point: GeoPoint) -> None:
        self._update(
            last_lat=point.latitude,
            last_lon=point.longitude,
            last_location_time=point.timestamp_ms,
        )

    def load_location(self) -> GeoPoint | None:
        with self._lock:
            data = self._read()
        try:
            return GeoPoint(
                float(data["last_lat"]),
                float(data["last_lon"]),
                data.get("last_location_time"),
            )
        except (KeyError, TypeError, ValueError):
            return None
