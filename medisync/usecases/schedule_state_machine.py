"""Schedule State Machine: commands that move slots between dispensing states.

Every command is a remote write (or a read followed by one); nothing is kept
locally. The device advances ``pending -> started -> in_progress -> taken``
(or ``missed``) on its own; this module only exposes the command-driven edges:

    configure        any      -> pending  (full overwrite, enabled)
    disable          any      -> pending  (full overwrite, disabled)
    trigger_dispense enabled  -> manual_trigger (+ journal entry)
    reset_status     existing -> pending  (partial update)

Outcomes:
    Rejected input and absent/disabled targets are return values, never
    exceptions. Remote failures surface as :class:`UseCaseError` and are not
    retried here.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any

from medisync.adapters.slot_store import SlotStore
from medisync.domain.ports import UseCaseError
from medisync.domain.schedule_rules import (
    configured_record,
    disabled_record,
    manual_trigger_entry,
    reset_fields,
    triggered_record,
    validate_schedule,
)
from medisync.domain.time_utils import Clock, local_now, log_date, log_timestamp, slot_stamp
from medisync.usecases.activity_journal import ActivityJournal
from medisync.usecases.error_mapping import map_store_error


class TriggerResult(str, Enum):
    """Outcome of :meth:`ScheduleStateMachine.trigger_dispense`."""

    TRIGGERED = "triggered"
    BUSY = "busy"
    """Another trigger was still in flight; nothing was written."""
    SKIPPED = "skipped"
    """Slot absent or disabled; nothing was written."""


class ScheduleStateMachine:
    """Command surface for slot configuration and dispensing status."""

    def __init__(
        self,
        slots: SlotStore,
        journal: ActivityJournal,
        *,
        clock: Clock = local_now,
    ) -> None:
        self.slots = slots
        self.journal = journal
        self.clock = clock
        # One trigger at a time across the whole process, not per slot.
        self._trigger_gate = threading.Lock()
        self._log = logging.getLogger(__name__)

    @property
    def slot_count(self) -> int:
        return self.slots.paths.slot_count

    @property
    def trigger_in_flight(self) -> bool:
        return self._trigger_gate.locked()

    def configure(self, slot_id: Any, hour: Any, minute: Any, medication_name: Any = "") -> bool:
        """Enable ``slot_id`` at ``hour:minute`` with status ``pending``.

        Returns:
            ``True`` when the record was written, ``False`` when any argument is
            out of range (nothing is written in that case).

        Raises:
            UseCaseError: ``CONFIGURE_FAILED`` or a mapped store code.
        """
        request = validate_schedule(
            slot_id, hour, minute, medication_name, slot_count=self.slot_count
        )
        if request is None:
            self._log.debug(
                "configure rejected: slot=%r hour=%r minute=%r", slot_id, hour, minute
            )
            return False
        record = configured_record(request, slot_stamp(self.clock()))
        try:
            self.slots.overwrite(request.slot_id, record)
        except Exception as exc:
            raise map_store_error(exc, default_code="CONFIGURE_FAILED") from exc
        self._log.info(
            "slot%s scheduled %02d:%02d (%s)",
            request.slot_id,
            request.hour,
            request.minute,
            request.medication_name,
        )
        return True

    def disable(self, slot_id: int) -> bool:
        """Overwrite ``slot_id`` with a disabled, cleared record.

        Journal history for the slot is left untouched.

        Raises:
            UseCaseError: ``DISABLE_FAILED`` or a mapped store code.
        """
        if not self._valid_slot(slot_id, "disable"):
            return False
        try:
            self.slots.overwrite(slot_id, disabled_record(slot_stamp(self.clock())))
        except Exception as exc:
            raise map_store_error(exc, default_code="DISABLE_FAILED") from exc
        self._log.info("slot%s disabled", slot_id)
        return True

    def trigger_dispense(self, slot_id: int) -> TriggerResult:
        """Mark ``slot_id`` as manually triggered and journal the command.

        The slot write and the journal append are two separate remote writes.
        If the append fails after the slot write succeeded, the raised error
        carries ``meta["slot_written"] = True`` and the slot stays in
        ``manual_trigger`` without a journal entry.

        Raises:
            UseCaseError: ``TRIGGER_FAILED`` or a mapped store code.
        """
        if not self._trigger_gate.acquire(blocking=False):
            self._log.debug("trigger slot%s rejected: another trigger in flight", slot_id)
            return TriggerResult.BUSY
        try:
            return self._trigger(slot_id)
        finally:
            self._trigger_gate.release()

    def reset_status(self, slot_id: int) -> bool:
        """Return an existing slot to ``pending``; time and name are kept.

        Returns:
            ``True`` when the slot existed and was updated.

        Raises:
            UseCaseError: ``RESET_FAILED`` or a mapped store code.
        """
        if not self._valid_slot(slot_id, "reset"):
            return False
        try:
            current = self.slots.read(slot_id)
            if current is None:
                self._log.debug("reset slot%s skipped: no record", slot_id)
                return False
            self.slots.patch(slot_id, reset_fields(slot_stamp(self.clock())))
        except Exception as exc:
            raise map_store_error(exc, default_code="RESET_FAILED") from exc
        self._log.info("slot%s reset to pending", slot_id)
        return True

    # ------------------------------------------------------------------
    def _trigger(self, slot_id: int) -> TriggerResult:
        if not self._valid_slot(slot_id, "trigger"):
            return TriggerResult.SKIPPED
        try:
            current = self.slots.read(slot_id)
        except Exception as exc:
            raise map_store_error(exc, default_code="TRIGGER_FAILED") from exc
        if current is None or current.get("enabled") is not True:
            self._log.debug("trigger slot%s skipped: absent or disabled", slot_id)
            return TriggerResult.SKIPPED

        now = self.clock()
        try:
            self.slots.overwrite(slot_id, triggered_record(current, slot_stamp(now)))
        except Exception as exc:
            raise map_store_error(exc, default_code="TRIGGER_FAILED") from exc

        entry = manual_trigger_entry(slot_id, timestamp=log_timestamp(now), date=log_date(now))
        try:
            self.journal.append(entry)
        except UseCaseError as exc:
            self._log.warning("slot%s triggered but journal append failed: %s", slot_id, exc)
            exc.meta["slot_written"] = True
            raise
        self._log.info("slot%s manually triggered", slot_id)
        return TriggerResult.TRIGGERED

    def _valid_slot(self, slot_id: Any, action: str) -> bool:
        if self.slots.paths.is_valid_slot(slot_id):
            return True
        self._log.debug("%s rejected: slot %r outside 1..%s", action, slot_id, self.slot_count)
        return False


__all__ = ["ScheduleStateMachine", "TriggerResult"]
