from __future__ import annotations

import threading
import time
from typing import Any

_DEFAULT_TTL = 5.0  # seconds


class ListingCache:
    """Short-lived cache for the full business listing.

    Writes to the store call ``invalidate()``, which bumps ``version``. A
    reader passes the version it saw before reading the store to ``set()``;
    the value is dropped if a write happened in between.
    """

    def __init__(self, ttl: float = _DEFAULT_TTL) -> None:
        self.ttl = ttl
        self._value: Any | None = None
        self._created_at: float = 0.0
        self._hits = 0
        self._misses = 0
        self._version = 0
        self._lock = threading.Lock()

    def get(self) -> Any | None:
        with self._lock:
            if self._value is not None and time.time() - self._created_at < self.ttl:
                self._hits += 1
                return self._value
            self._value = None
            self._misses += 1
            return None

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def set(self, value: Any, version: int | None = None) -> bool:
        """Cache *value* unless the cache was invalidated since *version*."""
        with self._lock:
            if version is not None and version != self._version:
                return False
            self._value = value
            self._created_at = time.time()
            return True

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._created_at = 0.0
            self._version += 1

    def get_stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": 0 if self._value is None else len(self._value),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._value = None
            self._created_at = 0.0
            self._hits = 0
            self._misses = 0
            self._version += 1
