"""
In-process TTL cache for Sentinel.

Entries expire lazily: an expired entry is dropped the next time it is
read, there is no background sweeper.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """Expiring key/value store with a single TTL for every entry"""

    def __init__(self, ttl_sec: float, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            ttl_sec: Lifetime of each entry in seconds
            clock: Monotonic time source, injectable for tests
        """
        self.ttl = float(ttl_sec)
        self._clock = clock
        self._store: Dict[str, CacheEntry[T]] = {}

    def get(self, key: str) -> Optional[T]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._store.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._store[key] = CacheEntry(value=value, expires_at=self._clock() + self.ttl)

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        # counts entries not yet evicted, expired ones included
        return len(self._store)
