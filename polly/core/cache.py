"""
In-memory view cache with TTL support.

Holds rendered read models (poll detail, results, poll lists) so repeated page
loads do not hit the row store. Mutations invalidate the keys they affect; the
TTL only bounds staleness for writes that happen outside this process.

Entries carry their own TTL so one class can back both this cache and the
server-side CSRF token store, which is a separate instance.
"""

import time
import threading
from typing import Any, Callable, Dict, Optional, Tuple
from datetime import datetime
from collections import OrderedDict

from polly.core.config import settings


class TTLCache:
    """
    Thread-safe LRU cache whose entries expire individually.

    Storage format: OrderedDict[key: (value, stored_at, ttl_seconds)]
    """

    def __init__(self, max_size: int = 100, default_ttl: float = 5.0):
        self._cache: "OrderedDict[str, Tuple[Any, float, float]]" = OrderedDict()
        # Reentrant so get_or_fetch can call get/set while holding the lock
        self._lock = threading.RLock()
        self._max_size = max_size
        self._default_ttl = default_ttl
        self._hits = 0
        self._misses = 0

    def _is_fresh(self, key: str) -> bool:
        _, stored_at, ttl = self._cache[key]
        return time.time() - stored_at <= ttl

    def get(self, key: str) -> Optional[Any]:
        """Return the value for key, or None when missing or expired."""
        with self._lock:
            if key not in self._cache:
                return None
            if not self._is_fresh(key):
                del self._cache[key]
                return None
            self._cache.move_to_end(key)
            return self._cache[key][0]

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store value, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]

            self._cache[key] = (value, time.time(), self._default_ttl if ttl is None else ttl)

            while len(self._cache) > self._max_size:
                self._cache.popitem(last=False)

    def invalidate(self, *keys: str) -> None:
        """Remove keys from cache (for manual invalidation)."""
        with self._lock:
            for key in keys:
                self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics for monitoring.

        Returns size, capacity, hit/miss counters, hit rate and per-entry age.
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0

            entries = {}
            now = time.time()
            for key, (_, stored_at, ttl) in self._cache.items():
                entries[key] = {
                    "age_seconds": round(now - stored_at, 2),
                    "ttl_seconds": ttl,
                    "cached_at": datetime.fromtimestamp(stored_at).isoformat()
                }

            return {
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 2),
                "entries": entries
            }


def get_or_fetch(
    cache: TTLCache,
    cache_key: str,
    fetch_func: Callable[[], Any],
    ttl_seconds: Optional[float] = None
) -> Any:
    """
    Get data from cache or fetch fresh data if missing or expired.

    Double-check locking: the fast path reads without the lock, a miss takes
    the lock, re-checks, and only then calls fetch_func so concurrent misses
    on one key trigger a single fetch. A fetch that raises caches nothing.
    """
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        with cache._lock:
            cache._hits += 1
        return cached_data

    with cache._lock:
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            cache._hits += 1
            return cached_data

        cache._misses += 1
        fresh_data = fetch_func()
        cache.set(cache_key, fresh_data, ttl=ttl_seconds)
        return fresh_data


# Cache key builders; every reader and invalidator goes through these
def poll_key(poll_id: str) -> str:
    return f"poll:{poll_id}"


def results_key(poll_id: str) -> str:
    return f"poll_results:{poll_id}"


def user_polls_key(user_id: str) -> str:
    return f"user_polls:{user_id}"


ALL_POLLS_KEY = "admin_all_polls"


# Process-wide cache shared by all requests
global_cache = TTLCache(
    max_size=settings.CACHE_MAX_SIZE,
    default_ttl=settings.CACHE_TTL_SECONDS,
)
