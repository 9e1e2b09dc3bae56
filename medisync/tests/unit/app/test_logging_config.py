from __future__ import annotations

import logging

from medisync.utils import logging as logging_utils


def test_env_level_overrides_preferences(monkeypatch) -> None:
    monkeypatch.setenv("MEDISYNC_LOG_LEVEL", "warning")

    assert logging_utils.apply_preferences(True) == logging.WARNING
    assert logging_utils.env_debug_enabled() is False


def test_debug_flag_enables_debug_but_keeps_transport_quiet(monkeypatch) -> None:
    monkeypatch.delenv("MEDISYNC_LOG_LEVEL", raising=False)
    monkeypatch.setenv("MEDISYNC_DEBUG", "1")

    assert logging_utils.env_debug_enabled() is True
    assert logging_utils.configure_root() == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.INFO
    assert logging.getLogger("httpx").level == logging.INFO


def test_preferences_without_env(monkeypatch) -> None:
    monkeypatch.delenv("MEDISYNC_LOG_LEVEL", raising=False)
    monkeypatch.delenv("MEDISYNC_DEBUG", raising=False)

    assert logging_utils.apply_preferences(True) == logging.DEBUG
    assert logging_utils.apply_preferences(False) == logging.INFO


def test_env_level_parsing() -> None:
    assert logging_utils.env_level({}) is None
    assert logging_utils.env_level({"MEDISYNC_LOG_LEVEL": "15"}) == 15
    assert logging_utils.env_level({"MEDISYNC_LOG_LEVEL": "bogus"}) == logging.INFO
    assert logging_utils.env_level({"MEDISYNC_DEBUG": "yes"}) == logging.DEBUG
    assert logging_utils.env_level({"MEDISYNC_DEBUG": "0"}) is None
