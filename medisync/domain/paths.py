"""Remote store path layout for one dispensing device.

Every adapter and use case builds paths through :class:`StorePaths` so the
``{device}/slots/slot{n}`` and ``{device}/logs`` layout lives in one place.
"""

from __future__ import annotations

from dataclasses import dataclass

from .entities import DEFAULT_SLOT_COUNT


@dataclass(frozen=True)
class StorePaths:
    """Path builder bound to a device id and its slot bound."""

    device_id: str = "my_device_1"
    slot_count: int = DEFAULT_SLOT_COUNT
    connection_path: str = "connection-status"

    def __post_init__(self) -> None:
        if not isinstance(self.device_id, str) or not self.device_id.strip("/ "):
            raise ValueError("device_id must be a non-empty string.")
        if isinstance(self.slot_count, bool) or int(self.slot_count) < 1:
            raise ValueError("slot_count must be a positive integer.")

    @property
    def slots(self) -> str:
        return f"{self.device_id.strip('/')}/slots"

    @property
    def logs(self) -> str:
        return f"{self.device_id.strip('/')}/logs"

    def slot(self, slot_id: int) -> str:
        return f"{self.slots}/{slot_key(slot_id)}"

    def is_valid_slot(self, slot_id: object) -> bool:
        if isinstance(slot_id, bool) or not isinstance(slot_id, int):
            return False
        return 1 <= slot_id <= self.slot_count


def slot_key(slot_id: int) -> str:
    """Return the child key used for a slot record (``slot3``)."""
    return f"slot{int(slot_id)}"


__all__ = ["StorePaths", "slot_key"]
