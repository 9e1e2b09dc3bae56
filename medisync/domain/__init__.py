"""Domain package exports for value objects and pure schedule rules."""

from .entities import (
    ActivityLogEntry,
    ConnectionState,
    DEFAULT_SLOT_COUNT,
    Slot,
    SlotStatus,
    display_key,
    placeholder_name,
)
from .paths import StorePaths
from .slot_records import build_schedule, parse_slot

__all__ = [
    "ActivityLogEntry",
    "ConnectionState",
    "DEFAULT_SLOT_COUNT",
    "Slot",
    "SlotStatus",
    "StorePaths",
    "build_schedule",
    "display_key",
    "parse_slot",
    "placeholder_name",
]
