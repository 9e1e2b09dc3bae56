from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from ..domain.entities import ActivityLogEntry, ConnectionState, Slot, SlotStatus
from ..domain.schedule_rules import can_reset, can_trigger
from ..usecases.activity_journal import JournalView
from .status_format import status_label, status_tone


@dataclass(frozen=True)
class ScheduleRow:
    """One active schedule line, ordered by ``time``."""

    time: str
    slot_id: int
    medication_name: str
    status: str
    status_label: str
    tone: str
    can_trigger: bool
    can_reset: bool
    can_disable: bool = True


@dataclass(frozen=True)
class LogRow:
    key: str
    timestamp: str
    date: str
    slot_id: Optional[int]
    status_label: str
    tone: str
    details: str


@dataclass(frozen=True)
class Overview:
    total_slots: int
    active_schedules: int
    pending: int
    total_logs: int


@dataclass
class DashboardVM:
    """Turns sync snapshots into rows and counters for the dashboard views."""

    total_slots: int
    on_schedule_rows: Optional[Callable[[List[ScheduleRow]], None]] = None
    on_log_rows: Optional[Callable[[List[LogRow]], None]] = None
    on_overview: Optional[Callable[[Overview], None]] = None
    on_connection: Optional[Callable[[str], None]] = None

    def __post_init__(self) -> None:
        self.schedule_rows: List[ScheduleRow] = []
        self.log_rows: List[LogRow] = []
        self.connection: ConnectionState = ConnectionState.UNKNOWN
        self._schedule: Mapping[str, Slot] = {}
        self._journal: JournalView = JournalView()

    # ------------------------------------------------------------------
    # Snapshot consumers (wire these to SyncHooks)
    # ------------------------------------------------------------------
    def apply_schedule(self, schedule: Mapping[str, Slot]) -> None:
        self._schedule = schedule
        self.schedule_rows = self.derive_schedule_rows(schedule)
        if self.on_schedule_rows:
            self.on_schedule_rows(list(self.schedule_rows))
        self._emit_overview()

    def apply_journal(self, journal: JournalView) -> None:
        self._journal = journal
        self.log_rows = [self._log_row(entry) for entry in journal]
        if self.on_log_rows:
            self.on_log_rows(list(self.log_rows))
        self._emit_overview()

    def apply_connection(self, state: ConnectionState) -> None:
        self.connection = state
        if self.on_connection:
            self.on_connection(self.connection_label)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @staticmethod
    def derive_schedule_rows(schedule: Mapping[str, Slot]) -> List[ScheduleRow]:
        """Return rows sorted by ``HH:MM`` key."""
        rows: List[ScheduleRow] = []
        for time_key, slot in sorted(schedule.items(), key=lambda item: item[0]):
            rows.append(
                ScheduleRow(
                    time=time_key,
                    slot_id=slot.slot_id,
                    medication_name=slot.medication_name,
                    status=slot.status.value,
                    status_label=status_label(slot.status),
                    tone=status_tone(slot.status),
                    can_trigger=can_trigger(slot.status),
                    can_reset=can_reset(slot.status),
                )
            )
        return rows

    @property
    def overview(self) -> Overview:
        slots = list(self._schedule.values())
        return Overview(
            total_slots=self.total_slots,
            active_schedules=len(slots),
            pending=sum(1 for slot in slots if slot.status is SlotStatus.PENDING),
            total_logs=len(self._journal),
        )

    @property
    def connection_label(self) -> str:
        if self.connection is ConnectionState.CONNECTED:
            return "Connected"
        if self.connection is ConnectionState.DISCONNECTED:
            return "Disconnected"
        return "Connecting..."

    # ------------------------------------------------------------------
    def _emit_overview(self) -> None:
        if self.on_overview:
            self.on_overview(self.overview)

    @staticmethod
    def _log_row(entry: ActivityLogEntry) -> LogRow:
        return LogRow(
            key=entry.key,
            timestamp=entry.timestamp,
            date=entry.date,
            slot_id=entry.slot_id,
            status_label=status_label(entry.status),
            tone=status_tone(entry.status),
            details=entry.details or "",
        )
