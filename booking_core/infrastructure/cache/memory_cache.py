"""TTL cache for provider responses."""

import logging
from typing import Any, Generic, TypeVar

from booking_core.application.interfaces.clock import Clock, SystemClock

T = TypeVar("T")


class InMemoryCache(Generic[T]):
    """
    In-memory cache with per-entry TTL measured against an injected clock.

    Expired entries are dropped lazily on read and in bulk by `clean_expired`.
    With `max_size` set, a full cache sweeps expired entries on `set` and then
    evicts the oldest entry.

    Example:
        cache = InMemoryCache[AvailabilityResult](name="availability", default_ttl_seconds=300)
        cache.set(query.cache_key, result)
    """

    def __init__(
        self,
        name: str = "cache",
        default_ttl_seconds: float | None = None,
        clock: Clock | None = None,
        max_size: int | None = None,
    ):
        self.name = name
        self.default_ttl_seconds = default_ttl_seconds
        self.max_size = max_size
        self._clock = clock or SystemClock()
        self._store: dict[str, tuple[T, float]] = {}
        self._hits = 0
        self._misses = 0
        self._logger = logging.getLogger(f"{__name__}.{name}")

    def _is_expired(self, expiry: float) -> bool:
        return self._clock.timestamp() >= expiry

    def get(self, key: str) -> T | None:
        entry = self._store.get(key)
        if entry is None:
            self._misses += 1
            return None

        value, expiry = entry
        if self._is_expired(expiry):
            del self._store[key]
            self._logger.debug("Cache entry expired", extra={"key": key})
            self._misses += 1
            return None

        self._hits += 1
        return value

    def contains(self, key: str) -> bool:
        """Live-entry check that does not count towards hit/miss stats."""
        entry = self._store.get(key)
        return entry is not None and not self._is_expired(entry[1])

    def set(self, key: str, value: T, ttl: float | None = None) -> None:
        if self.max_size is not None and key not in self._store and len(self._store) >= self.max_size:
            self._make_room()
        effective_ttl = ttl if ttl is not None else self.default_ttl_seconds
        expiry = self._clock.timestamp() + effective_ttl if effective_ttl is not None else float("inf")
        self._store[key] = (value, expiry)
        self._logger.debug("Cache entry set", extra={"key": key, "ttl": effective_ttl})

    def _make_room(self) -> None:
        if self.clean_expired() or not self._store:
            return
        oldest_key = next(iter(self._store))
        del self._store[oldest_key]
        self._logger.debug(
            "Cache evicted entry",
            extra={"key": oldest_key, "reason": "max_size"},
        )

    def invalidate(self, key: str) -> bool:
        if key in self._store:
            del self._store[key]
            self._logger.debug("Cache entry invalidated", extra={"key": key})
            return True
        return False

    def invalidate_prefix(self, prefix: str) -> int:
        """Drops every key starting with `prefix`; returns how many were removed."""
        keys = [key for key in self._store if key.startswith(prefix)]
        for key in keys:
            del self._store[key]
        return len(keys)

    def clean_expired(self) -> int:
        expired = [key for key, (_, expiry) in self._store.items() if self._is_expired(expiry)]
        for key in expired:
            del self._store[key]
        return len(expired)

    def clear(self) -> int:
        count = len(self._store)
        self._store.clear()
        self._hits = 0
        self._misses = 0
        self._logger.info("Cache cleared", extra={"entries_cleared": count})
        return count

    def size(self) -> int:
        return len(self._store)

    def stats(self) -> dict[str, Any]:
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0.0
        return {
            "size": len(self._store),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_percent": round(hit_rate, 1),
        }
