from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from medisync.domain.entities import SlotStatus
from medisync.domain.schedule_rules import (
    MANUAL_TRIGGER_DETAILS,
    can_reset,
    can_trigger,
    configured_record,
    disabled_record,
    manual_trigger_entry,
    reset_fields,
    triggered_record,
    validate_schedule,
)
from medisync.domain.time_utils import log_date, log_timestamp, slot_stamp


@pytest.mark.parametrize(
    "slot, hour, minute",
    [(0, 8, 0), (7, 8, 0), (1, 24, 0), (1, -1, 0), (1, 8, 60), (1, 8, -1), (True, 8, 0), ("x", 8, 0), (1, 8.5, 0)],
)
def test_validate_schedule_rejects_out_of_range(slot, hour, minute) -> None:
    assert validate_schedule(slot, hour, minute, "Aspirin", slot_count=6) is None


def test_validate_schedule_accepts_bounds_and_fills_placeholder() -> None:
    low = validate_schedule(1, 0, 0, "", slot_count=6)
    high = validate_schedule("6", "23", "59", "  Vitamin D ", slot_count=6)

    assert low is not None and low.medication_name == "Medicine 1"
    assert high is not None
    assert (high.slot_id, high.hour, high.minute) == (6, 23, 59)
    assert high.medication_name == "Vitamin D"


def test_configured_record_shape() -> None:
    request = validate_schedule(3, 8, 30, "Aspirin", slot_count=6)

    assert configured_record(request, "07:59") == {
        "enabled": True,
        "hour": 8,
        "minute": 30,
        "medicationName": "Aspirin",
        "status": "pending",
        "manualTrigger": False,
        "lastUpdated": "07:59",
    }


def test_disabled_record_clears_schedule() -> None:
    record = disabled_record("10:00")

    assert record["enabled"] is False
    assert (record["hour"], record["minute"], record["medicationName"]) == (0, 0, "")
    assert record["status"] == "pending"


def test_triggered_record_keeps_schedule_fields() -> None:
    current = {"enabled": True, "hour": 8, "minute": 30, "medicationName": "Aspirin", "status": "pending"}

    record = triggered_record(current, "09:00")

    assert record["manualTrigger"] is True
    assert record["status"] == "manual_trigger"
    assert record["lastUpdated"] == "09:00"
    assert record["hour"] == 8 and record["medicationName"] == "Aspirin"
    assert current["status"] == "pending"


def test_reset_fields_only_touch_status() -> None:
    assert set(reset_fields("11:11")) == {"status", "manualTrigger", "lastUpdated"}


def test_manual_trigger_entry() -> None:
    entry = manual_trigger_entry(3, timestamp="09:00:05", date="2024-03-05")

    assert entry == {
        "timestamp": "09:00:05",
        "status": "manual_trigger",
        "slot": 3,
        "details": MANUAL_TRIGGER_DETAILS,
        "date": "2024-03-05",
    }
    assert MANUAL_TRIGGER_DETAILS == "Manually triggered from dashboard"


def test_action_availability() -> None:
    assert can_trigger(SlotStatus.PENDING)
    assert not can_trigger(SlotStatus.TAKEN)
    assert can_reset(SlotStatus.TAKEN)
    assert can_reset(SlotStatus.MISSED)
    assert not can_reset(SlotStatus.STARTED)


def test_stamp_formats() -> None:
    moment = datetime(2024, 3, 5, 23, 30, 7, tzinfo=timezone(timedelta(hours=-5)))

    assert slot_stamp(moment) == "23:30"
    assert log_timestamp(moment) == "23:30:07"
    # calendar date is taken in UTC
    assert log_date(moment) == "2024-03-06"
