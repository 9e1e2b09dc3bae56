"""Row action flags, argument validation and slot record builders.

Commands do not consult a transition table: the device drives the
dispensing states and commands overwrite or patch whatever is stored. Record
builders return the exact JSON objects written to the store; the
state machine use case only decides *when* to write them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .entities import SlotStatus, placeholder_name

MANUAL_TRIGGER_DETAILS = "Manually triggered from dashboard"


def can_trigger(status: SlotStatus) -> bool:
    """Whether a manual dispense is offered for a slot in ``status``."""
    return status is SlotStatus.PENDING


def can_reset(status: SlotStatus) -> bool:
    """Whether a reset is offered; only the end-of-cycle states qualify."""
    return status.is_terminal


@dataclass(frozen=True)
class ScheduleRequest:
    """Validated arguments for configuring one slot."""

    slot_id: int
    hour: int
    minute: int
    medication_name: str


def validate_schedule(
    slot_id: Any,
    hour: Any,
    minute: Any,
    medication_name: Any,
    *,
    slot_count: int,
) -> Optional[ScheduleRequest]:
    """Return a request when every argument is in range, else ``None``."""
    slot_num = _strict_int(slot_id)
    hour_num = _strict_int(hour)
    minute_num = _strict_int(minute)
    if slot_num is None or hour_num is None or minute_num is None:
        return None
    if not 1 <= slot_num <= slot_count:
        return None
    if not 0 <= hour_num <= 23:
        return None
    if not 0 <= minute_num <= 59:
        return None
    name = str(medication_name).strip() if medication_name is not None else ""
    return ScheduleRequest(
        slot_id=slot_num,
        hour=hour_num,
        minute=minute_num,
        medication_name=name or placeholder_name(slot_num),
    )


def configured_record(request: ScheduleRequest, stamp: str) -> Dict[str, Any]:
    return {
        "enabled": True,
        "hour": request.hour,
        "minute": request.minute,
        "medicationName": request.medication_name,
        "status": SlotStatus.PENDING.value,
        "manualTrigger": False,
        "lastUpdated": stamp,
    }


def disabled_record(stamp: str) -> Dict[str, Any]:
    return {
        "enabled": False,
        "hour": 0,
        "minute": 0,
        "medicationName": "",
        "status": SlotStatus.PENDING.value,
        "lastUpdated": stamp,
    }


def triggered_record(current: Mapping[str, Any], stamp: str) -> Dict[str, Any]:
    record = dict(current)
    record.update(
        {
            "manualTrigger": True,
            "status": SlotStatus.MANUAL_TRIGGER.value,
            "lastUpdated": stamp,
        }
    )
    return record


def reset_fields(stamp: str) -> Dict[str, Any]:
    return {
        "status": SlotStatus.PENDING.value,
        "manualTrigger": False,
        "lastUpdated": stamp,
    }


def manual_trigger_entry(slot_id: int, *, timestamp: str, date: str) -> Dict[str, Any]:
    return {
        "timestamp": timestamp,
        "status": SlotStatus.MANUAL_TRIGGER.value,
        "slot": slot_id,
        "details": MANUAL_TRIGGER_DETAILS,
        "date": date,
    }


def _strict_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


__all__ = [
    "MANUAL_TRIGGER_DETAILS",
    "ScheduleRequest",
    "can_reset",
    "can_trigger",
    "configured_record",
    "disabled_record",
    "manual_trigger_entry",
    "reset_fields",
    "triggered_record",
    "validate_schedule",
]
