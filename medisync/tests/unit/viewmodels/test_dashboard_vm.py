from __future__ import annotations

from medisync.domain.entities import ConnectionState, Slot, SlotStatus
from medisync.usecases.activity_journal import build_view
from medisync.viewmodels.dashboard_vm import DashboardVM, Overview
from medisync.viewmodels.status_format import status_label, status_tone


def _slot(slot_id: int, hour: int, minute: int, status: SlotStatus = SlotStatus.PENDING) -> Slot:
    return Slot(
        slot_id=slot_id,
        enabled=True,
        hour=hour,
        minute=minute,
        medication_name=f"Med {slot_id}",
        status=status,
    )


def test_apply_schedule_emits_sorted_rows_and_overview() -> None:
    rows_updates = []
    overview_updates = []
    vm = DashboardVM(
        total_slots=6,
        on_schedule_rows=rows_updates.append,
        on_overview=overview_updates.append,
    )
    schedule = {
        "20:00": _slot(1, 20, 0),
        "08:30": _slot(3, 8, 30, SlotStatus.TAKEN),
        "12:05": _slot(2, 12, 5, SlotStatus.MANUAL_TRIGGER),
    }

    vm.apply_schedule(schedule)

    rows = rows_updates[-1]
    assert [row.time for row in rows] == ["08:30", "12:05", "20:00"]
    taken = rows[0]
    assert taken.status_label == "Medication Taken"
    assert taken.tone == "ok"
    assert taken.can_reset is True and taken.can_trigger is False
    assert rows[2].can_trigger is True and rows[2].can_reset is False
    assert rows[1].status_label == "Manually Triggered"
    assert overview_updates[-1] == Overview(total_slots=6, active_schedules=3, pending=1, total_logs=0)


def test_apply_journal_builds_newest_first_rows() -> None:
    log_updates = []
    vm = DashboardVM(total_slots=6, on_log_rows=log_updates.append)
    view = build_view(
        {
            "k1": {"timestamp": "08:00:00", "status": "started", "slot": 1, "date": "2024-03-05"},
            "k2": {"timestamp": "08:00:30", "status": "missed", "slot": 1, "date": "2024-03-05"},
        }
    )

    vm.apply_journal(view)

    rows = log_updates[-1]
    assert [row.key for row in rows] == ["k2", "k1"]
    assert rows[0].status_label == "Medication Missed"
    assert rows[0].tone == "error"
    assert rows[0].details == ""
    assert vm.overview.total_logs == 2


def test_connection_label() -> None:
    labels = []
    vm = DashboardVM(total_slots=6, on_connection=labels.append)

    assert vm.connection_label == "Connecting..."
    vm.apply_connection(ConnectionState.CONNECTED)
    vm.apply_connection(ConnectionState.DISCONNECTED)

    assert labels == ["Connected", "Disconnected"]


def test_status_format_handles_unknown_tokens() -> None:
    assert status_label("in_progress") == "Dispensing in Progress"
    assert status_label(SlotStatus.STARTED) == "Dispensing Started"
    assert status_label("Jammed") == "Jammed"
    assert status_tone("jammed") == "idle"
    assert status_tone("STARTED") == "active"
