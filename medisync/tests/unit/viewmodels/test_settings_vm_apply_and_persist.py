from __future__ import annotations

import pytest

from medisync.viewmodels.settings_vm import SettingsVM, default_settings_payload


def test_defaults() -> None:
    payload = default_settings_payload()

    assert payload["device_id"] == "my_device_1"
    assert payload["slot_count"] == 6
    assert payload["database_url"] == ""
    assert SettingsVM().is_valid() is False


def test_apply_dict_coerces_and_validates() -> None:
    vm = SettingsVM()

    vm.apply_dict(
        {
            "database_url": " https://demo.firebaseio.com/ ",
            "device_id": "/kitchen_unit/",
            "slot_count": "8",
            "request_timeout_s": 4,
            "debug_logging": "yes",
        }
    )

    assert vm.database_url == "https://demo.firebaseio.com"
    assert vm.device_id == "kitchen_unit"
    assert vm.slot_count == 8
    assert vm.request_timeout_s == 4
    assert vm.debug_logging is True
    assert vm.is_valid() is True
    paths = vm.store_paths()
    assert paths.slot(8) == "kitchen_unit/slots/slot8"


@pytest.mark.parametrize(
    "payload",
    [
        {"unknown": 1},
        {"slot_count": 0},
        {"slot_count": True},
        {"device_id": ""},
        {"database_url": 5},
        "not-a-mapping",
    ],
)
def test_apply_dict_rejects_bad_payloads(payload) -> None:
    with pytest.raises(ValueError):
        SettingsVM().apply_dict(payload)


def test_apply_env_overrides_persisted_values() -> None:
    vm = SettingsVM()
    vm.apply_dict({"database_url": "https://a.example", "device_id": "one"})

    vm.apply_env({"MEDISYNC_DATABASE_URL": "https://b.example", "MEDISYNC_DEVICE_ID": " two "})

    assert vm.database_url == "https://b.example"
    assert vm.device_id == "two"

    vm.apply_env({})
    assert vm.device_id == "two"


def test_cmd_save_requires_valid_settings() -> None:
    saved = []
    vm = SettingsVM(on_save=saved.append)

    with pytest.raises(ValueError):
        vm.cmd_save()

    vm.database_url = "https://demo.firebaseio.com"
    vm.cmd_save()

    assert saved == [vm.to_dict()]
