"""Cache port used by the resolver, pricing lookups and submission."""

from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class CachePort(Protocol[T]):
    """
    Implementations:
    - infrastructure/cache/memory_cache.py (InMemoryCache)
    """

    def get(self, key: str) -> T | None:
        """The cached value, or None if missing or expired."""
        ...

    def contains(self, key: str) -> bool:
        ...

    def set(self, key: str, value: T, ttl: float | None = None) -> None:
        ...

    def invalidate(self, key: str) -> bool:
        ...

    def invalidate_prefix(self, prefix: str) -> int:
        ...

    def stats(self) -> dict[str, Any]:
        ...

    def clear(self) -> int:
        ...
