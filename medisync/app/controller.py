"""Adapter and use-case wiring for the dispenser runtime.

This module owns lazy construction of the remote store adapter and of the
use-case objects that depend on values in
:class:`medisync.viewmodels.settings_vm.SettingsVM`. It is invoked by the
entry point before any store operation.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..adapters.firebase_rest import FirebaseRestStore
from ..adapters.slot_store import SlotStore
from ..domain.ports import RemoteStorePort
from ..usecases.activity_journal import ActivityJournal
from ..usecases.schedule_state_machine import ScheduleStateMachine
from ..usecases.sync_controller import SyncController, SyncHooks
from ..viewmodels.dashboard_vm import DashboardVM
from ..viewmodels.settings_vm import SettingsVM


class AppController:
    """Create and cache the store adapter, use-cases, and dashboard VM.

    Call chain:
        ``medisync.app.main`` creates one instance per process and calls
        ``ensure_ready`` before issuing commands or starting synchronization.
    """

    def __init__(self, settings_vm: SettingsVM, store: Optional[RemoteStorePort] = None) -> None:
        """Initialize controller with settings-backed lazy dependencies.

        Args:
            settings_vm: Settings state containing database URL, device id,
                slot bound, and timeout preferences.
            store: Optional pre-built store (offline/in-memory runs); when
                omitted a :class:`FirebaseRestStore` is built from settings.
        """
        self.settings_vm = settings_vm
        self._injected_store = store
        self._log = logging.getLogger(__name__)
        self._store: Optional[RemoteStorePort] = None
        self.slots: Optional[SlotStore] = None
        self.journal: Optional[ActivityJournal] = None
        self.machine: Optional[ScheduleStateMachine] = None
        self.sync: Optional[SyncController] = None
        self.dashboard: Optional[DashboardVM] = None

    @property
    def store(self) -> Optional[RemoteStorePort]:
        """Return the cached store adapter used by every use case."""
        return self._store

    def reset(self) -> None:
        """Stop synchronization and drop all cached objects.

        The next ``ensure_ready`` call rebuilds everything from current
        settings values.
        """
        if self.sync is not None:
            self.sync.stop()
        self._store = None
        self.slots = None
        self.journal = None
        self.machine = None
        self.sync = None
        self.dashboard = None

    def ensure_ready(self) -> bool:
        """Ensure adapters/use-cases are available.

        Returns:
            ``True`` when dependencies are available, ``False`` when no store
            was injected and settings carry no usable database URL.
        """
        if self._store is not None and self.machine is not None and self.sync is not None:
            return True

        store = self._injected_store
        if store is None:
            if not self.settings_vm.is_valid():
                self._log.warning("settings incomplete: database_url/device_id required")
                return False
            cfg = self.settings_vm.config
            store = FirebaseRestStore(
                cfg.database_url,
                request_timeout_s=cfg.request_timeout_s,
                retries=cfg.retries,
                stream_reconnect_max_s=cfg.stream_reconnect_max_s,
            )

        paths = self.settings_vm.store_paths()
        self._store = store
        self.slots = SlotStore(store, paths)
        self.journal = ActivityJournal(store, paths)
        self.machine = ScheduleStateMachine(self.slots, self.journal)
        self.dashboard = DashboardVM(total_slots=paths.slot_count)
        self.sync = SyncController(
            store,
            self.slots,
            self.journal,
            hooks=SyncHooks(
                on_schedule=self.dashboard.apply_schedule,
                on_journal=self.dashboard.apply_journal,
                on_connection=self.dashboard.apply_connection,
            ),
        )
        self._log.debug("wired device %s (%s slots)", paths.device_id, paths.slot_count)
        return True
