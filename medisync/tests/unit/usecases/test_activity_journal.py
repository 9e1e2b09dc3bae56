from __future__ import annotations

import pytest

from medisync.adapters.store_memory import InMemoryStore
from medisync.domain.paths import StorePaths
from medisync.domain.ports import UseCaseError
from medisync.usecases.activity_journal import ActivityJournal, JournalView, build_view


def _entry(status: str, slot: int = 1) -> dict:
    return {"timestamp": "08:00:00", "status": status, "slot": slot, "date": "2024-03-05"}


def test_view_lists_newest_append_first() -> None:
    store = InMemoryStore()
    journal = ActivityJournal(store, StorePaths())

    for status in ("started", "in_progress", "taken"):
        journal.append(_entry(status))

    view = journal.current_view()

    assert [entry.status for entry in view] == ["taken", "in_progress", "started"]
    # views are restartable
    assert [entry.status for entry in view] == ["taken", "in_progress", "started"]
    assert view.latest().status == "taken"


def test_order_follows_store_order_not_timestamp() -> None:
    raw = {
        "k1": {"timestamp": "23:59:59", "status": "A"},
        "k2": {"timestamp": "00:00:00", "status": "B"},
        "k3": {"timestamp": "12:00:00", "status": "C"},
    }

    assert [entry.key for entry in build_view(raw)] == ["k3", "k2", "k1"]


def test_build_view_skips_malformed_records() -> None:
    view = build_view({"a": "junk", "b": {"status": "taken", "slot": "2"}, "c": None})

    assert len(view) == 1
    entry = next(iter(view))
    assert entry.slot_id == 2
    assert entry.details is None
    assert not build_view(None)
    assert not build_view([])


def test_for_slot_filters_entries() -> None:
    view = build_view({"a": _entry("taken", 1), "b": _entry("missed", 2), "c": _entry("taken", 2)})

    assert [entry.key for entry in view.for_slot(2)] == ["c", "b"]


def test_append_returns_generated_key() -> None:
    store = InMemoryStore(key_generator=lambda: "-Nfixed")
    journal = ActivityJournal(store, StorePaths(device_id="dev"))

    assert journal.append(_entry("taken")) == "-Nfixed"
    assert store.get("dev/logs/-Nfixed")["status"] == "taken"


def test_clear_removes_whole_journal() -> None:
    store = InMemoryStore()
    journal = ActivityJournal(store, StorePaths())
    journal.append(_entry("taken"))
    journal.append(_entry("missed"))

    journal.clear()

    assert len(journal.current_view()) == 0
    assert store.writes()[-1] == ("remove", "my_device_1/logs")


def test_subscribe_delivers_rebuilt_views() -> None:
    store = InMemoryStore()
    journal = ActivityJournal(store, StorePaths())
    views = []

    sub = journal.subscribe(views.append)
    journal.append(_entry("taken"))
    sub.close()

    assert isinstance(views[0], JournalView)
    assert [len(view) for view in views] == [0, 1]


@pytest.mark.parametrize(
    "op, call, code",
    [
        ("push", lambda j: j.append(_entry("taken")), "STORE_ERROR"),
        ("remove", lambda j: j.clear(), "STORE_ERROR"),
        ("get", lambda j: j.current_view(), "STORE_ERROR"),
    ],
)
def test_failures_surface_as_use_case_errors(op, call, code) -> None:
    journal = ActivityJournal(InMemoryStore(fail_on={op}), StorePaths())

    with pytest.raises(UseCaseError) as excinfo:
        call(journal)

    assert excinfo.value.code == code
