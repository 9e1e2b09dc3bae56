"""Synchronization Controller: live views of slots, journal, and connectivity.

The controller owns exactly three subscriptions for its lifetime (slot
subtree, journal subtree, connectivity signal). Each notification rebuilds the
corresponding view from scratch and replaces the published snapshot; views are
never patched incrementally and are only ever mutated from these callbacks.

Observers register :class:`SyncHooks`. Hooks run on whatever thread delivered
the notification; an exception in one hook is logged and does not affect
other hooks or the subscription itself.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional

from medisync.adapters.slot_store import SlotStore
from medisync.domain.entities import ConnectionState, DisplayKey, Slot
from medisync.domain.ports import RemoteStorePort, Subscription
from medisync.usecases.activity_journal import ActivityJournal, JournalView

ScheduleView = Mapping[DisplayKey, Slot]


def _noop(*_: object, **__: object) -> None:
    """Default no-op callback used for hooks."""


@dataclass(frozen=True)
class SyncSnapshot:
    """Immutable bundle of the three published views."""

    schedule: ScheduleView = field(default_factory=lambda: MappingProxyType({}))
    journal: JournalView = field(default_factory=JournalView)
    connection: ConnectionState = ConnectionState.UNKNOWN


@dataclass(eq=False)
class SyncHooks:
    """Optional callbacks fired after each published view replacement."""

    on_schedule: Callable[[ScheduleView], None] = _noop
    on_journal: Callable[[JournalView], None] = _noop
    on_connection: Callable[[ConnectionState], None] = _noop

    def __post_init__(self) -> None:
        self.on_schedule = self.on_schedule or _noop
        self.on_journal = self.on_journal or _noop
        self.on_connection = self.on_connection or _noop


def connection_state_from(
    value: Any, previous: ConnectionState = ConnectionState.UNKNOWN
) -> ConnectionState:
    """Interpret the raw connectivity signal.

    ``True`` is connected and any other value is disconnected, except that an
    empty signal (``None``) never moves the state away from ``unknown``.
    """
    if value is True:
        return ConnectionState.CONNECTED
    if value is None and previous is ConnectionState.UNKNOWN:
        return ConnectionState.UNKNOWN
    return ConnectionState.DISCONNECTED


class SyncController:
    """Keeps derived views in step with the remote store."""

    def __init__(
        self,
        store: RemoteStorePort,
        slots: SlotStore,
        journal: ActivityJournal,
        hooks: Optional[SyncHooks] = None,
    ) -> None:
        self.store = store
        self.slots = slots
        self.journal = journal
        self._listeners: List[SyncHooks] = [hooks] if hooks else []
        self._snapshot = SyncSnapshot()
        self._subscriptions: List[Subscription] = []
        self._starting = False
        self._lock = threading.RLock()
        self._log = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        with self._lock:
            return bool(self._subscriptions)

    def start(self) -> None:
        """Open the three subscriptions; calling it again while running is a no-op."""
        with self._lock:
            if self._subscriptions or self._starting:
                return
            self._starting = True
        paths = self.slots.paths
        self._log.info("sync start: %s, %s, %s", paths.slots, paths.logs, paths.connection_path)
        # Subscriptions may deliver their first value synchronously, so hooks
        # run here and the lock must not be held.
        opened: List[Subscription] = []
        try:
            opened.append(self.slots.subscribe(self._on_schedule))
            opened.append(self.journal.subscribe(self._on_journal))
            opened.append(self.store.subscribe(paths.connection_path, self._on_connection))
        except Exception:
            for subscription in opened:
                subscription.close()
            with self._lock:
                self._starting = False
            raise
        with self._lock:
            self._subscriptions = opened
            self._starting = False

    def stop(self) -> None:
        """Close all subscriptions. Published views keep their last value."""
        with self._lock:
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            try:
                subscription.close()
            except Exception:
                self._log.exception("sync stop: failed to close subscription")
        if subscriptions:
            self._log.info("sync stopped")

    # ------------------------------------------------------------------
    # Observers and published state
    # ------------------------------------------------------------------
    def add_listener(self, hooks: SyncHooks) -> None:
        with self._lock:
            if hooks not in self._listeners:
                self._listeners.append(hooks)

    def remove_listener(self, hooks: SyncHooks) -> None:
        with self._lock:
            if hooks in self._listeners:
                self._listeners.remove(hooks)

    def snapshot(self) -> SyncSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def schedule(self) -> ScheduleView:
        return self.snapshot().schedule

    @property
    def journal_view(self) -> JournalView:
        return self.snapshot().journal

    @property
    def connection(self) -> ConnectionState:
        return self.snapshot().connection

    # ------------------------------------------------------------------
    # Subscription callbacks (the only writers of the published views)
    # ------------------------------------------------------------------
    def _on_schedule(self, schedule: Mapping[DisplayKey, Slot]) -> None:
        view: ScheduleView = MappingProxyType(dict(schedule))
        listeners = self._publish(schedule=view)
        self._log.debug("schedule view: %s active", len(view))
        self._fan_out(listeners, "on_schedule", view)

    def _on_journal(self, view: JournalView) -> None:
        listeners = self._publish(journal=view)
        self._log.debug("journal view: %s entries", len(view))
        self._fan_out(listeners, "on_journal", view)

    def _on_connection(self, raw: Any) -> None:
        with self._lock:
            previous = self._snapshot.connection
        state = connection_state_from(raw, previous)
        listeners = self._publish(connection=state)
        if state is not previous:
            log = self._log.warning if state is ConnectionState.DISCONNECTED else self._log.info
            log("store connection: %s", state.value)
        self._fan_out(listeners, "on_connection", state)

    def _publish(self, **changes: Any) -> List[SyncHooks]:
        with self._lock:
            current = self._snapshot
            self._snapshot = SyncSnapshot(
                schedule=changes.get("schedule", current.schedule),
                journal=changes.get("journal", current.journal),
                connection=changes.get("connection", current.connection),
            )
            return list(self._listeners)

    def _fan_out(self, listeners: List[SyncHooks], hook_name: str, value: Any) -> None:
        for hooks in listeners:
            try:
                getattr(hooks, hook_name)(value)
            except Exception:
                self._log.exception("sync listener %s failed", hook_name)


__all__ = [
    "ScheduleView",
    "SyncController",
    "SyncHooks",
    "SyncSnapshot",
    "connection_state_from",
]
