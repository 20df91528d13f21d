"""In-memory TTL cache for the project data service.

Province lists and project statistics change only when the database is
rebuilt, so the API caches them for a few minutes per process.
"""

import time
import threading
from typing import Any, Callable


class TTLCache:
    """Thread-safe in-memory cache with time-to-live (TTL) expiry.

    Entries expire after ``ttl_seconds`` seconds. At most ``maxsize``
    entries are kept; when full, the entry expiring soonest is evicted.

    Usage::

        cache = TTLCache(maxsize=32, ttl_seconds=300)
        provinces = cache.get_or_set(("provinces", db_path), load_provinces)
    """

    def __init__(self, maxsize: int = 128, ttl_seconds: float = 300.0) -> None:
        self._maxsize = maxsize
        self._ttl = ttl_seconds
        # key -> (value, expires_at)
        self._store: dict[Any, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: Any) -> Any | None:
        """Return cached value for *key*, or ``None`` if absent or expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            value, expires_at = entry
            if time.monotonic() > expires_at:
                del self._store[key]
                self._misses += 1
                return None
            self._hits += 1
            return value

    def set(self, key: Any, value: Any) -> None:
        """Store *value* under *key* with the configured TTL."""
        expires_at = time.monotonic() + self._ttl
        with self._lock:
            if key not in self._store and len(self._store) >= self._maxsize:
                oldest_key = min(self._store, key=lambda k: self._store[k][1])
                del self._store[oldest_key]
            self._store[key] = (value, expires_at)

    def get_or_set(self, key: Any, factory: Callable[[], Any]) -> Any:
        """Return the cached value, computing and storing it on a miss.

        Exceptions from *factory* propagate and nothing is cached.
        """
        value = self.get(key)
        if value is None:
            value = factory()
            self.set(key, value)
        return value

    def delete(self, key: Any) -> None:
        """Remove a single entry (no-op if not present)."""
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        """Remove all entries and reset statistics."""
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        """Return ``hits``, ``misses`` and ``size`` (expired entries purged)."""
        with self._lock:
            now = time.monotonic()
            expired = [k for k, (_, exp) in self._store.items() if now > exp]
            for k in expired:
                del self._store[k]
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._store),
            }
