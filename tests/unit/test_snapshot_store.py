"""
Unit tests for the snapshot store.
"""

import threading

import pytest

from sailor.core.exceptions import ConfigNotLoadedError, NotLoadedError, SecretsNotLoadedError
from sailor.core.models import ResourceKind
from sailor.store.snapshot_store import EMPTY_MISC, SnapshotStore


class TestSnapshotStore:

    def test_not_loaded_before_commit(self):
        store = SnapshotStore()

        assert store.read(ResourceKind.CONFIG) is None
        with pytest.raises(ConfigNotLoadedError):
            store.value(ResourceKind.CONFIG)
        with pytest.raises(SecretsNotLoadedError):
            store.value(ResourceKind.SECRET)

    def test_not_loaded_is_distinct_from_key_errors(self):
        store = SnapshotStore()
        with pytest.raises(NotLoadedError) as exc_info:
            store.value(ResourceKind.CONFIG)
        assert not isinstance(exc_info.value, KeyError)

    def test_misc_empty_before_commit(self):
        assert SnapshotStore().value(ResourceKind.MISC) is EMPTY_MISC

    def test_commit_replaces_value(self):
        store = SnapshotStore()
        first = store.commit(ResourceKind.CONFIG, {"app": 1})
        second = store.commit(ResourceKind.CONFIG, {"app": 2})

        assert store.value(ResourceKind.CONFIG) == {"app": 2}
        assert second.version > first.version
        assert store.read(ResourceKind.CONFIG) is second

    def test_commit_same_value_twice(self):
        store = SnapshotStore()
        store.commit(ResourceKind.CONFIG, {"app": "value"})
        store.commit(ResourceKind.CONFIG, {"app": "value"})

        assert store.value(ResourceKind.CONFIG) == {"app": "value"}
        assert store.is_loaded(ResourceKind.CONFIG)

    def test_categories_are_independent(self):
        store = SnapshotStore()
        store.commit(ResourceKind.CONFIG, {"app": 1})

        assert not store.is_loaded(ResourceKind.SECRET)
        store.commit(ResourceKind.SECRET, {"db": "pw"})
        assert store.value(ResourceKind.CONFIG) == {"app": 1}

    def test_misc_entries_isolated(self):
        store = SnapshotStore()
        store.commit_misc("a", b"first")
        store.commit_misc("b", b"second")

        misc = store.value(ResourceKind.MISC)
        assert misc["a"] == b"first"
        assert misc["b"] == b"second"

    def test_misc_previous_mapping_untouched(self):
        store = SnapshotStore()
        store.commit_misc("a", b"first")
        before = store.value(ResourceKind.MISC)

        store.commit_misc("a", b"changed")

        assert before["a"] == b"first"
        assert store.value(ResourceKind.MISC)["a"] == b"changed"

    def test_misc_mapping_is_read_only(self):
        store = SnapshotStore()
        store.commit_misc("a", b"first")
        with pytest.raises(TypeError):
            store.value(ResourceKind.MISC)["a"] = b"x"

    def test_concurrent_misc_commits_keep_all_entries(self):
        store = SnapshotStore()
        barrier = threading.Barrier(8)

        def writer(index):
            barrier.wait()
            for i in range(50):
                store.commit_misc(f"name-{index}", f"{index}-{i}".encode())

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        misc = store.value(ResourceKind.MISC)
        assert set(misc) == {f"name-{n}" for n in range(8)}
        for n in range(8):
            assert misc[f"name-{n}"] == f"{n}-49".encode()
        assert store.version == 400

    def test_concurrent_readers_see_whole_values(self):
        store = SnapshotStore()
        store.commit(ResourceKind.CONFIG, {"a": 0, "b": 0})
        stop = threading.Event()
        torn = []

        def writer():
            i = 0
            while not stop.is_set():
                i += 1
                store.commit(ResourceKind.CONFIG, {"a": i, "b": i})

        def reader():
            for _ in range(2000):
                value = store.value(ResourceKind.CONFIG)
                if value["a"] != value["b"]:
                    torn.append(value)

        w = threading.Thread(target=writer)
        w.start()
        readers = [threading.Thread(target=reader) for _ in range(4)]
        for r in readers:
            r.start()
        for r in readers:
            r.join()
        stop.set()
        w.join()

        assert torn == []
