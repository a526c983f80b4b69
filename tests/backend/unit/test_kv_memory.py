"""
Unit tests for the key-value store backends and factory.
"""
import pytest

from bizboost.services.kv_base import KeyValueStore, StoredValue
from bizboost.services.kv_factory import get_kv_store
from bizboost.services.kv_memory import MemoryKeyValueStore


class FakeClock:
    def __init__(self):
        self.t = 100.0

    def __call__(self):
        return self.t


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryKeyValueStore(clock=clock)


def test_set_and_pop(store):
    entry = store.set("k", {"a": 1}, 10)
    assert isinstance(entry, StoredValue)
    assert entry.expires_at == 110.0

    popped = store.pop("k")
    assert popped.value == {"a": 1}
    assert store.pop("k") is None


def test_pop_returns_expired_entry(store, clock):
    store.set("k", "v", 10)
    clock.t += 11
    popped = store.pop("k")
    assert popped is not None
    assert popped.is_expired(store.now())
    assert "k" not in store


def test_set_replaces_value(store):
    store.set("k", 1, 10)
    store.set("k", 2, 10)
    assert len(store) == 1
    assert store.pop("k").value == 2


def test_incr_counts_within_window(store, clock):
    assert store.incr("c", 60) == 1
    assert store.incr("c", 60) == 2
    clock.t += 30
    assert store.incr("c", 60) == 3


def test_incr_starts_new_window_after_expiry(store, clock):
    store.incr("c", 60)
    store.incr("c", 60)
    clock.t += 61
    assert store.incr("c", 60) == 1


def test_sweep_and_clear(store, clock):
    store.set("a", 1, 5)
    store.set("b", 2, 50)
    clock.t += 10
    assert store.sweep() == 1
    assert "a" not in store and "b" in store

    store.clear()
    assert len(store) == 0


def test_factory_builds_memory_backend():
    kv = get_kv_store("memory")
    assert isinstance(kv, KeyValueStore)
    assert kv.name == "memory"


def test_factory_backend_name_is_case_insensitive():
    assert get_kv_store("MEMORY").name == "memory"


def test_factory_rejects_unknown_backend():
    with pytest.raises(RuntimeError, match="Unsupported KV_BACKEND"):
        get_kv_store("redis")
