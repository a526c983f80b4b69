"""
In-process Key-Value Store

Dictionary-backed implementation of KeyValueStore for single-instance
deployments. Contents are lost on restart, which is acceptable for captcha
challenges and rate-limit counters.
"""
import threading
import time
from typing import Any, Callable, Dict, Optional

from .kv_base import KeyValueStore, StoredValue


class MemoryKeyValueStore(KeyValueStore):
    """
    Thread-safe in-memory store.

    Every operation takes the lock for a single dictionary operation (or one
    pass over the dictionary for sweep), so request handlers are never blocked
    for longer than that.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._data: Dict[str, StoredValue] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "memory"

    def now(self) -> float:
        return self._clock()

    def set(self, key: str, value: Any, ttl_seconds: float) -> StoredValue:
        entry = StoredValue(value=value, expires_at=self.now() + ttl_seconds)
        with self._lock:
            self._data[key] = entry
        return entry

    def pop(self, key: str) -> Optional[StoredValue]:
        with self._lock:
            return self._data.pop(key, None)

    def incr(self, key: str, ttl_seconds: float) -> int:
        now = self.now()
        with self._lock:
            entry = self._data.get(key)
            if entry is None or entry.is_expired(now):
                entry = StoredValue(value=0, expires_at=now + ttl_seconds)
                self._data[key] = entry
            entry.value += 1
            return entry.value

    def sweep(self) -> int:
        now = self.now()
        with self._lock:
            expired = [k for k, v in self._data.items() if v.is_expired(now)]
            for k in expired:
                del self._data[k]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data
