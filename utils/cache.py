"""In-memory TTL cache for GET responses made by the funding client.

Reference lists (states, credit ratings, value ranges) rarely change during
a session, so ApiClient keeps successful GET payloads here for a short time.
Writes invalidate every cached entry under the endpoint they touched.
"""

import time
import threading
from typing import Any, Mapping, Optional


def make_key(endpoint: str, params: Optional[Mapping[str, Any]] = None) -> tuple:
    """Build a hashable cache key from an endpoint and its query params.

    Params are sorted so {"a": 1, "b": 2} and {"b": 2, "a": 1} share a key.
    List values are frozen to tuples.

    Examples:
        make_key("/projects/states") -> ("/projects/states", ())
        make_key("/projects", {"skip": 0}) -> ("/projects", (("skip", 0),))
    """
    items = []
    for name, value in sorted((params or {}).items()):
        if isinstance(value, list):
            value = tuple(value)
        items.append((name, value))
    return (endpoint, tuple(items))


class TTLCache:
    """Bounded, lock-protected store of decoded GET payloads.

    A payload stays fresh for ``ttl_seconds``. At ``maxsize`` entries the
    one due to expire first makes room for the newcomer; ``maxsize <= 0``
    turns caching off.

    Usage::

        cache = TTLCache(maxsize=128, ttl_seconds=300)
        cache.set(make_key("/projects/states"), ["Maharashtra", "Kerala"])
        states = cache.get(make_key("/projects/states"))
    """

    def __init__(self, maxsize: int = 128, ttl_seconds: float = 300.0) -> None:
        """
        Args:
            maxsize: Entry limit (FUNDING_CACHE_SIZE, default 128).
            ttl_seconds: Freshness window (FUNDING_CACHE_TTL, default 300).
        """
        self._maxsize = maxsize
        self._ttl = ttl_seconds
        # key -> (value, expires_at)
        self._store: dict[Any, tuple[Any, float]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: Any) -> Any | None:
        """Fresh payload stored under *key*; None on a miss or once stale."""
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
        """Cache *value* under *key* for the next ttl_seconds."""
        if self._maxsize <= 0:
            return
        expires_at = time.monotonic() + self._ttl
        with self._lock:
            if key not in self._store and len(self._store) >= self._maxsize:
                oldest_key = min(self._store, key=lambda k: self._store[k][1])
                del self._store[oldest_key]
            self._store[key] = (value, expires_at)

    def delete(self, key: Any) -> None:
        """Forget *key* if cached."""
        with self._lock:
            self._store.pop(key, None)

    def invalidate_prefix(self, endpoint: str) -> int:
        """Drop every entry whose endpoint starts with *endpoint*.

        Keys must come from make_key(). A write to "/commitments/12" passes
        "/commitments" so listings of the collection are refetched.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            doomed = [
                k for k in self._store
                if isinstance(k, tuple) and k and str(k[0]).startswith(endpoint)
            ]
            for k in doomed:
                del self._store[k]
            return len(doomed)

    def clear(self) -> None:
        """Drop everything, e.g. after the token changes, and zero the counters."""
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> dict[str, int]:
        """Hit and miss counters plus the number of unexpired entries."""
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
