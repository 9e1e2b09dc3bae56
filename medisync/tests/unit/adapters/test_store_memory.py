from __future__ import annotations

import pytest

from medisync.adapters.store_errors import StoreError
from medisync.adapters.store_memory import PUSH_CHARS, InMemoryStore, PushIdGenerator


def test_push_ids_sort_in_generation_order_within_one_millisecond() -> None:
    gen = PushIdGenerator(clock_ms=lambda: 1_700_000_000_000)

    keys = [gen() for _ in range(50)]

    assert all(len(key) == 20 for key in keys)
    assert all(ch in PUSH_CHARS for key in keys for ch in key)
    assert keys == sorted(keys)
    assert len(set(keys)) == 50


def test_push_ids_sort_across_milliseconds() -> None:
    ticks = iter([1000, 1001, 5000, 64 ** 3])
    gen = PushIdGenerator(clock_ms=lambda: next(ticks))

    keys = [gen() for _ in range(4)]

    assert keys == sorted(keys)


def test_set_get_update_remove() -> None:
    store = InMemoryStore()

    store.set("dev/slots/slot1", {"enabled": True, "hour": 8})
    store.update("dev/slots/slot1", {"hour": 9, "status": "pending"})

    assert store.get("dev/slots/slot1") == {"enabled": True, "hour": 9, "status": "pending"}
    assert store.get("dev/slots") == {"slot1": {"enabled": True, "hour": 9, "status": "pending"}}

    store.remove("dev/slots/slot1")

    assert store.get("dev/slots/slot1") is None
    assert store.get("dev") is None


def test_get_returns_copies() -> None:
    store = InMemoryStore()
    store.set("a", {"b": 1})

    value = store.get("a")
    value["b"] = 2

    assert store.get("a") == {"b": 1}


def test_subscribe_delivers_current_value_then_overlapping_writes() -> None:
    store = InMemoryStore()
    store.set("dev/logs/x", {"status": "taken"})
    seen = []

    sub = store.subscribe("dev/logs", seen.append)
    store.set("dev/slots/slot1", {"enabled": True})
    store.push("dev/logs", {"status": "missed"})
    store.remove("dev")

    assert len(seen) == 3
    assert seen[0] == {"x": {"status": "taken"}}
    assert len(seen[1]) == 2
    assert seen[2] is None

    sub.close()
    store.set("dev/logs/y", {})

    assert len(seen) == 3
    assert store.listener_count == 0


def test_fail_on_raises_store_error_without_recording() -> None:
    store = InMemoryStore(fail_on={"push"})

    with pytest.raises(StoreError):
        store.push("dev/logs", {"status": "taken"})

    assert store.calls == []
    assert store.get("dev/logs") is None


def test_set_connected_is_not_a_recorded_call() -> None:
    store = InMemoryStore()
    seen = []
    store.subscribe("connection-status", seen.append)

    store.set_connected(True)
    store.set_connected(False)

    assert seen == [None, True, False]
    assert store.writes() == []
