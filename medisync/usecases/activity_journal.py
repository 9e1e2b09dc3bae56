"""Activity Journal: append-only dispensing events under ``{device}/logs``.

Entries are written with store-generated keys and read back as one unordered
mapping. The presentation order is the reverse of the order the store returns
them (newest append first); ``timestamp`` values are never parsed for sorting.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence, Tuple

from medisync.domain.entities import ActivityLogEntry
from medisync.domain.paths import StorePaths
from medisync.domain.ports import RemoteStorePort, Subscription
from medisync.domain.slot_records import coerce_int
from medisync.usecases.error_mapping import map_store_error


class JournalView:
    """Restartable, newest-first view over one journal snapshot.

    Each iteration walks the captured entries backwards without copying them,
    so the view can be iterated any number of times.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Sequence[ActivityLogEntry] = ()) -> None:
        self._entries: Tuple[ActivityLogEntry, ...] = tuple(entries)

    def __iter__(self) -> Iterator[ActivityLogEntry]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __repr__(self) -> str:
        return f"JournalView({len(self._entries)} entries)"

    def latest(self) -> Optional[ActivityLogEntry]:
        return self._entries[-1] if self._entries else None

    def for_slot(self, slot_id: int) -> Iterator[ActivityLogEntry]:
        return (entry for entry in self if entry.slot_id == slot_id)


def parse_entry(key: str, raw: Any) -> Optional[ActivityLogEntry]:
    """Build a journal entry from its stored record; non-mappings are skipped."""
    if not isinstance(raw, Mapping):
        return None
    slot = raw.get("slot")
    details = raw.get("details")
    return ActivityLogEntry(
        key=str(key),
        timestamp=str(raw.get("timestamp") or ""),
        status=str(raw.get("status") or ""),
        slot_id=coerce_int(slot) if slot is not None else None,
        date=str(raw.get("date") or ""),
        details=str(details) if details not in (None, "") else None,
    )


def build_view(raw_logs: Any) -> JournalView:
    """Turn the raw ``logs`` subtree into a :class:`JournalView`."""
    if not isinstance(raw_logs, Mapping):
        return JournalView()
    entries = []
    for key, raw in raw_logs.items():
        entry = parse_entry(key, raw)
        if entry is not None:
            entries.append(entry)
    return JournalView(entries)


class ActivityJournal:
    """Append, clear, and observe the device journal."""

    def __init__(self, store: RemoteStorePort, paths: StorePaths) -> None:
        self.store = store
        self.paths = paths
        self._log = logging.getLogger(__name__)

    def append(self, entry: Mapping[str, Any]) -> str:
        """Write ``entry`` under a new generated key and return that key.

        Raises:
            UseCaseError: ``JOURNAL_APPEND_FAILED`` or a mapped store code.
        """
        try:
            key = self.store.push(self.paths.logs, dict(entry))
        except Exception as exc:
            raise map_store_error(exc, default_code="JOURNAL_APPEND_FAILED") from exc
        self._log.info("journal + %s (%s slot=%s)", key, entry.get("status"), entry.get("slot"))
        return key

    def clear(self) -> None:
        """Delete the whole journal subtree. Irreversible."""
        try:
            self.store.remove(self.paths.logs)
        except Exception as exc:
            raise map_store_error(exc, default_code="JOURNAL_CLEAR_FAILED") from exc
        self._log.info("journal cleared for %s", self.paths.device_id)

    def current_view(self) -> JournalView:
        """Read the journal once and return it newest first."""
        try:
            raw = self.store.get(self.paths.logs)
        except Exception as exc:
            raise map_store_error(exc, default_code="JOURNAL_READ_FAILED") from exc
        return build_view(raw)

    def subscribe(self, handler: Callable[[JournalView], None]) -> Subscription:
        """Deliver a rebuilt view for every change to the journal subtree."""
        return self.store.subscribe(self.paths.logs, lambda raw: handler(build_view(raw)))


__all__ = ["ActivityJournal", "JournalView", "build_view", "parse_entry"]
