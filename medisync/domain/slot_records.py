"""Pure translation of raw slot records into :class:`Slot` entities.

The slot subtree arrives as an untyped mapping (``{"slot1": {...}, ...}``).
Nothing here raises on malformed input: non-numeric times become ``0``,
missing names get the placeholder, unknown statuses become ``pending``.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Mapping, Optional

from .entities import DisplayKey, Slot, SlotStatus, placeholder_name
from .paths import slot_key


def coerce_int(value: Any) -> int:
    """Return ``value`` as an int, or ``0`` when it is not numeric."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            try:
                parsed = float(text)
            except ValueError:
                return 0
            return coerce_int(parsed)
    return 0


def parse_slot(slot_id: int, raw: Any) -> Optional[Slot]:
    """Build a :class:`Slot` from one raw record; ``None`` if it is not a mapping."""
    if not isinstance(raw, Mapping):
        return None
    name = raw.get("medicationName")
    name_text = str(name).strip() if name is not None else ""
    last_updated = raw.get("lastUpdated")
    return Slot(
        slot_id=slot_id,
        enabled=raw.get("enabled") is True,
        hour=coerce_int(raw.get("hour")),
        minute=coerce_int(raw.get("minute")),
        medication_name=name_text or placeholder_name(slot_id),
        status=SlotStatus.parse(raw.get("status")),
        manual_trigger=raw.get("manualTrigger") is True,
        last_updated=str(last_updated) if last_updated is not None else None,
    )


def build_schedule(raw_slots: Any, slot_count: int) -> Dict[DisplayKey, Slot]:
    """Map ``HH:MM`` display keys to enabled slots.

    Slots are visited in id order ``1..slot_count``. Two enabled slots sharing a
    time collapse onto one key and the higher slot id wins.
    """
    if not isinstance(raw_slots, Mapping):
        return {}
    schedule: Dict[DisplayKey, Slot] = {}
    for slot_id in range(1, int(slot_count) + 1):
        slot = parse_slot(slot_id, raw_slots.get(slot_key(slot_id)))
        if slot is None or not slot.enabled:
            continue
        schedule[slot.display_key] = slot
    return schedule


__all__ = ["build_schedule", "coerce_int", "parse_slot"]
