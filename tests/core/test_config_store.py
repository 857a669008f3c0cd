"""Tests for the configuration store."""

import threading

import pytest

from src.core.config_store import ConfigStore

__all__ = []


def test_store_starts_empty() -> None:
    """A new store should expose an empty snapshot."""
    assert dict(ConfigStore().get_snapshot()) == {}


def test_replace_installs_new_snapshot() -> None:
    """Reads after replace() should observe the new snapshot."""
    store = ConfigStore()
    store.replace("vars", {"name": "world"})

    assert dict(store.get_snapshot()) == {"name": "world"}


def test_snapshot_is_read_only() -> None:
    """Callers must not be able to mutate the published snapshot."""
    store = ConfigStore()
    store.replace("vars", {"name": "world"})

    with pytest.raises(TypeError):
        store.get_snapshot()["name"] = "mutated"  # type: ignore[index]


def test_replace_copies_input_mapping() -> None:
    """Mutating the dict passed to replace() should not leak into the store."""
    store = ConfigStore()
    source = {"name": "world"}
    store.replace("vars", source)
    source["name"] = "changed"

    assert store.get_snapshot()["name"] == "world"


def test_old_snapshot_unaffected_by_later_replace() -> None:
    """A reader holding a snapshot keeps seeing it after a replace."""
    store = ConfigStore()
    store.replace("vars", {"v": "1"})
    held = store.get_snapshot()
    store.replace("vars", {"v": "2"})

    assert held["v"] == "1"
    assert store.get_snapshot()["v"] == "2"


def test_callbacks_invoked_once_in_registration_order() -> None:
    """Every callback should run exactly once per replace, in order."""
    calls: list[tuple[str, str, dict[str, str]]] = []

    def make_callback(label: str):
        def callback(name, snapshot) -> None:
            calls.append((label, name, dict(snapshot)))

        return callback

    store = ConfigStore(make_callback("ctor"))
    store.register_callback(make_callback("first"))
    store.register_callback(make_callback("second"))

    store.replace("vars", {"x": "1"})

    assert calls == [
        ("ctor", "vars", {"x": "1"}),
        ("first", "vars", {"x": "1"}),
        ("second", "vars", {"x": "1"}),
    ]


def test_callbacks_run_after_pointer_update() -> None:
    """Callbacks should see the new snapshot through get_snapshot()."""
    store = ConfigStore()
    seen: list[dict[str, str]] = []
    store.register_callback(lambda name, snapshot: seen.append(dict(store.get_snapshot())))

    store.replace("vars", {"x": "new"})

    assert seen == [{"x": "new"}]


def test_late_callback_not_invoked_for_earlier_replace() -> None:
    """Registration only affects future replacements."""
    store = ConfigStore()
    store.replace("vars", {"x": "1"})
    seen: list[str] = []
    store.register_callback(lambda name, snapshot: seen.append(snapshot["x"]))

    store.replace("vars", {"x": "2"})

    assert seen == ["2"]


def test_callback_error_propagates_after_install() -> None:
    """A failing callback surfaces to the writer; the snapshot stays installed."""

    def broken(name, snapshot) -> None:
        raise RuntimeError("observer failed")

    store = ConfigStore(broken)

    with pytest.raises(RuntimeError, match="observer failed"):
        store.replace("vars", {"x": "1"})

    assert store.get_snapshot()["x"] == "1"


def test_concurrent_reads_never_observe_mixed_snapshot() -> None:
    """Readers racing writers should only see fully installed snapshots."""
    store = ConfigStore()
    store.replace("vars", {"a": "init", "b": "init"})
    stop = threading.Event()
    mixed: list[dict[str, str]] = []
    reads = 0

    def reader() -> None:
        nonlocal reads
        while not stop.is_set():
            snapshot = store.get_snapshot()
            reads += 1
            if snapshot["a"] != snapshot["b"]:
                mixed.append(dict(snapshot))

    def writer(prefix: str) -> None:
        for i in range(500):
            value = f"{prefix}-{i}"
            store.replace("vars", {"a": value, "b": value})

    readers = [threading.Thread(target=reader) for _ in range(4)]
    writers = [threading.Thread(target=writer, args=(f"w{n}",)) for n in range(3)]

    for t in readers:
        t.start()
    for t in writers:
        t.start()
    for t in writers:
        t.join()
    stop.set()
    for t in readers:
        t.join()

    assert mixed == []
    assert reads > 0
    assert store.get_snapshot()["a"] in {f"w{n}-499" for n in range(3)}
