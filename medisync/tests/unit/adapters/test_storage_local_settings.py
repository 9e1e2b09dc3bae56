import json

import pytest

from medisync.adapters.storage_local import StorageLocal
from medisync.viewmodels.settings_vm import SettingsVM


def test_user_settings_round_trip(tmp_path):
    storage = StorageLocal(root_dir=str(tmp_path))
    payload = {
        "database_url": "https://demo.firebaseio.com",
        "device_id": "my_device_1",
        "slot_count": 6,
        "request_timeout_s": 5,
        "debug_logging": True,
    }

    storage.save_user_settings(payload)

    assert storage.load_user_settings() == payload
    assert not (tmp_path / "user_settings.json.tmp").exists()


def test_user_settings_missing_file_and_save(tmp_path):
    storage = StorageLocal(root_dir=str(tmp_path / "nested"))
    settings_path = tmp_path / "nested" / "user_settings.json"

    assert storage.load_user_settings() is None

    vm = SettingsVM()
    storage.save_user_settings(vm.to_dict())

    with settings_path.open("r", encoding="utf-8") as fh:
        persisted = json.load(fh)
    assert persisted == vm.to_dict()


def test_user_settings_rejects_non_object(tmp_path):
    (tmp_path / "user_settings.json").write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        StorageLocal(root_dir=str(tmp_path)).load_user_settings()
