# core/cache.py

"""
In-memory response cache with TTL support.

Holds transient, non-authoritative copies of Supabase reads (facility and
product listings). Writes that change those rows invalidate the matching
keys or prefixes. Authorization lookups are never cached.
"""

from typing import Optional, Any, Dict
from datetime import datetime, timedelta
from threading import Lock
from core.logging_config import logger


class CacheEntry:
    """A cached value with expiration time."""

    def __init__(self, value: Any, ttl_seconds: int):
        self.value = value
        self.expires_at = datetime.now() + timedelta(seconds=ttl_seconds)

    def is_expired(self) -> bool:
        return datetime.now() >= self.expires_at


class SimpleCache:
    """
    Keyed TTL store with hit/miss counters.

    Thread-safe: sync routes run in FastAPI's threadpool and the
    remote authorization delegate runs Supabase calls in worker threads.
    """

    def __init__(self):
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Cached value, or None when missing or expired (expired entries are dropped)."""
        with self._lock:
            entry = self._cache.get(key)

            if entry is not None and entry.is_expired():
                del self._cache[key]
                entry = None

            if entry is None:
                self._misses += 1
                return None

            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int = 300):
        with self._lock:
            self._cache[key] = CacheEntry(value, ttl_seconds)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix. Returns number removed."""
        with self._lock:
            doomed = [key for key in self._cache if key.startswith(prefix)]
            for key in doomed:
                del self._cache[key]
            return len(doomed)

    def purge_expired(self) -> int:
        with self._lock:
            expired = [key for key, entry in self._cache.items() if entry.is_expired()]
            for key in expired:
                del self._cache[key]
            return len(expired)

    def clear(self):
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def size(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> dict:
        with self._lock:
            lookups = self._hits + self._misses
            return {
                "entries": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / lookups, 3) if lookups else None,
            }


# Process-wide instance shared by routers and the authorization delegate
_cache = SimpleCache()


def cache_get(key: str) -> Optional[Any]:
    return _cache.get(key)


def cache_set(key: str, value: Any, ttl_seconds: int = 300):
    _cache.set(key, value, ttl_seconds)


def cache_delete(key: str):
    if _cache.delete(key):
        logger.debug(f"Cache invalidated '{key}'")


def cache_delete_prefix(prefix: str):
    removed = _cache.delete_prefix(prefix)
    if removed:
        logger.debug(f"Cache invalidated {removed} entries under '{prefix}'")


def cache_stats() -> dict:
    """Counters for the app health check. Expired entries are purged first."""
    _cache.purge_expired()
    return _cache.stats()


def cache_clear():
    """Clear all cache entries and counters."""
    _cache.clear()
