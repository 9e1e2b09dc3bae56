from __future__ import annotations

from medisync.adapters.firebase_rest import FirebaseRestStore
from medisync.adapters.store_memory import InMemoryStore
from medisync.app.controller import AppController
from medisync.domain.entities import ConnectionState
from medisync.viewmodels.settings_vm import SettingsVM


def test_controller_ensure_ready_requires_database_url() -> None:
    controller = AppController(SettingsVM())

    assert controller.ensure_ready() is False
    assert controller.machine is None


def test_controller_builds_rest_store_from_settings() -> None:
    settings = SettingsVM()
    settings.database_url = "https://demo.firebaseio.com"
    settings.device_id = "kitchen_unit"

    controller = AppController(settings)

    assert controller.ensure_ready() is True
    assert isinstance(controller.store, FirebaseRestStore)
    assert controller.store.base_url == "https://demo.firebaseio.com"
    assert controller.slots.paths.slots == "kitchen_unit/slots"
    assert controller.journal is not None
    assert controller.sync is not None
    assert controller.dashboard.total_slots == 6


def test_controller_feeds_dashboard_from_injected_store() -> None:
    store = InMemoryStore()
    controller = AppController(SettingsVM(), store=store)
    assert controller.ensure_ready() is True

    controller.sync.start()
    controller.machine.configure(3, 8, 30, "Aspirin")
    store.set_connected(True)

    assert [row.time for row in controller.dashboard.schedule_rows] == ["08:30"]
    assert controller.dashboard.connection is ConnectionState.CONNECTED

    controller.reset()

    assert store.listener_count == 0
    assert controller.machine is None
    assert controller.ensure_ready() is True
    assert controller.store is store
