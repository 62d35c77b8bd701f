from booking_core.infrastructure.cache.memory_cache import InMemoryCache

__all__ = ["InMemoryCache"]
