from __future__ import annotations

"""Domain value objects shared across adapters, use-cases, and view models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DisplayKey = str

DEFAULT_SLOT_COUNT = 6


class SlotStatus(str, Enum):
    """Closed set of dispensing states a slot record can carry."""

    PENDING = "pending"
    STARTED = "started"
    IN_PROGRESS = "in_progress"
    MANUAL_TRIGGER = "manual_trigger"
    TAKEN = "taken"
    MISSED = "missed"

    @classmethod
    def parse(cls, value: object) -> "SlotStatus":
        """Return the status for ``value``; absent or unknown tokens map to pending."""
        if isinstance(value, cls):
            return value
        token = str(value or "").strip().lower()
        for member in cls:
            if member.value == token:
                return member
        return cls.PENDING

    @property
    def is_terminal(self) -> bool:
        return self in (SlotStatus.TAKEN, SlotStatus.MISSED)


class ConnectionState(str, Enum):
    """Connectivity of the remote store as seen by the sync controller."""

    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


@dataclass(frozen=True)
class Slot:
    """One enabled dispensing position as derived from its remote record."""

    slot_id: int
    """Position number in ``[1, slot_count]``."""
    enabled: bool
    hour: int
    minute: int
    medication_name: str
    status: SlotStatus = SlotStatus.PENDING
    manual_trigger: bool = False
    last_updated: Optional[str] = None
    """Audit-only stamp written by the last command; never compared."""

    def __post_init__(self) -> None:
        if isinstance(self.slot_id, bool) or not isinstance(self.slot_id, int) or self.slot_id < 1:
            raise ValueError("Slot id must be a positive integer.")

    @property
    def display_key(self) -> DisplayKey:
        return display_key(self.hour, self.minute)


@dataclass(frozen=True)
class ActivityLogEntry:
    """Immutable journal fact as appended to the remote store."""

    key: str
    """Store-generated identifier under the journal path."""
    timestamp: str
    status: str
    slot_id: Optional[int]
    date: str = ""
    details: Optional[str] = None


def display_key(hour: int, minute: int) -> DisplayKey:
    """Return the zero-padded ``HH:MM`` key used for the schedule view."""
    return f"{int(hour):02d}:{int(minute):02d}"


def placeholder_name(slot_id: int) -> str:
    """Default medication label for a slot without a configured name."""
    return f"Medicine {slot_id}"


__all__ = [
    "ActivityLogEntry",
    "ConnectionState",
    "DEFAULT_SLOT_COUNT",
    "DisplayKey",
    "Slot",
    "SlotStatus",
    "display_key",
    "placeholder_name",
]
