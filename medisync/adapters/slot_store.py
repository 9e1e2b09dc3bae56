"""Slot Store Adapter: the only component that touches slot records remotely.

Reads come back either as raw records (for read-modify-write commands) or as
the derived ``HH:MM -> Slot`` schedule via
:func:`medisync.domain.slot_records.build_schedule`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from medisync.domain.entities import DisplayKey, Slot
from medisync.domain.paths import StorePaths
from medisync.domain.ports import RemoteStorePort, Subscription
from medisync.domain.slot_records import build_schedule

ScheduleHandler = Callable[[Dict[DisplayKey, Slot]], None]


@dataclass
class SlotStore:
    store: RemoteStorePort
    paths: StorePaths

    def __post_init__(self) -> None:
        self._log = logging.getLogger(__name__)

    def read(self, slot_id: int) -> Optional[Dict[str, Any]]:
        """Return the raw record for ``slot_id`` or ``None`` when absent/malformed."""
        raw = self.store.get(self.paths.slot(slot_id))
        if not isinstance(raw, Mapping):
            return None
        return dict(raw)

    def overwrite(self, slot_id: int, record: Mapping[str, Any]) -> None:
        self._log.debug("slot%s <- %s", slot_id, dict(record))
        self.store.set(self.paths.slot(slot_id), dict(record))

    def patch(self, slot_id: int, fields: Mapping[str, Any]) -> None:
        self._log.debug("slot%s patch %s", slot_id, dict(fields))
        self.store.update(self.paths.slot(slot_id), dict(fields))

    def derive(self, raw_slots: Any) -> Dict[DisplayKey, Slot]:
        return build_schedule(raw_slots, self.paths.slot_count)

    def subscribe(self, handler: ScheduleHandler) -> Subscription:
        """Deliver a freshly derived schedule for every change to the slot subtree."""
        return self.store.subscribe(self.paths.slots, lambda raw: handler(self.derive(raw)))


__all__ = ["ScheduleHandler", "SlotStore"]
