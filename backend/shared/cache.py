"""
Caching utilities for the application.
"""

import time
from typing import Any, Callable


class Cache:
    """Small in-memory cache with per-entry TTL (Time To Live)."""

    def __init__(self, default_ttl: float = 3600, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize empty cache."""
        self.default_ttl = default_ttl
        self._clock = clock
        self._cache: dict[str, tuple[Any, float]] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get value from cache by key.

        Args:
            key: Cache key
            default: Returned when the key is missing or expired

        Returns:
            Cached value if present and not expired, otherwise ``default``
        """
        entry = self._cache.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._cache[key]
            return default
        return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` for ``ttl`` seconds (``default_ttl`` when omitted)."""
        effective_ttl = self.default_ttl if ttl is None else ttl
        self._cache[key] = (value, self._clock() + effective_ttl)

    def __contains__(self, key: str) -> bool:
        sentinel = object()
        return self.get(key, sentinel) is not sentinel

    def delete(self, key: str) -> None:
        """Delete value from cache."""
        self._cache.pop(key, None)

    def clear(self) -> None:
        """Clear all cached values."""
        self._cache.clear()

    def size(self) -> int:
        """Number of entries currently stored (expired ones included until touched)."""
        return len(self._cache)

    def cleanup_expired(self) -> int:
        """
        Remove expired items from cache.

        Returns:
            Number of expired items removed
        """
        now = self._clock()
        expired_keys = [key for key, (_, expires_at) in self._cache.items() if now >= expires_at]

        for key in expired_keys:
            del self._cache[key]

        return len(expired_keys)
