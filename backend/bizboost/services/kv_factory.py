"""
Key-Value Store Factory

Selects the store backend from settings.kv_backend. Only the in-process
backend ships with the application.
"""
from bizboost.config import settings
from .kv_base import KeyValueStore
from .kv_memory import MemoryKeyValueStore


def get_kv_store(backend: str | None = None) -> KeyValueStore:
    """
    Build a key-value store.

    Parameters:
    - backend: Backend name; defaults to settings.kv_backend

    Raises:
    - RuntimeError: unknown backend name
    """
    backend = (backend or settings.kv_backend).lower()
    if backend == "memory":
        return MemoryKeyValueStore()
    raise RuntimeError(f"Unsupported KV_BACKEND '{backend}'. Supported: memory")


# Shared store for the process (captchas and rate-limit counters)
kv_store = get_kv_store()
