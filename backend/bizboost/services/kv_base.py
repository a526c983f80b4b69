"""
Key-Value Store Abstract Interface

Short-lived state that does not belong in the database (captcha challenges,
rate-limit counters) goes through this interface, so a single-instance
deployment can keep it in process while a multi-instance one can swap in an
external cache without touching the callers.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class StoredValue:
    """A value together with its absolute expiry (epoch seconds, store clock)."""
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at < now


class KeyValueStore(ABC):
    """Key-Value Store Abstract Base Class"""

    @abstractmethod
    def now(self) -> float:
        """Current time on the store's clock (epoch seconds)"""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: float) -> StoredValue:
        """Insert or replace a value that expires ttl_seconds from now"""
        pass

    @abstractmethod
    def pop(self, key: str) -> Optional[StoredValue]:
        """
        Atomically get and delete a value.

        Returns the entry even if it has expired (callers decide how to report
        that); returns None when the key is absent. Of two concurrent callers
        for the same key, only one receives the entry.
        """
        pass

    @abstractmethod
    def incr(self, key: str, ttl_seconds: float) -> int:
        """
        Increment a fixed-window counter and return the new count.
        A missing or expired counter starts a new window at 1.
        """
        pass

    @abstractmethod
    def sweep(self) -> int:
        """Remove expired entries; returns how many were removed"""
        pass

    @abstractmethod
    def clear(self) -> None:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., "memory")"""
        pass
