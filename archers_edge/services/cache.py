"""In-memory snapshot cache with TTL support."""

from typing import Any, Optional
from cachetools import TTLCache
import logging
import threading

from archers_edge.config import get_settings

logger = logging.getLogger(__name__)


class CacheService:
    """Thread-safe snapshot cache, one TTL store per record type.

    Holds the last good copy of data read from the repository so that a
    failed read can fall back to it.
    """

    def __init__(self) -> None:
        """Initialize cache stores with appropriate TTLs."""
        settings = get_settings()

        self._profiles_cache: TTLCache = TTLCache(
            maxsize=16, ttl=settings.CACHE_PROFILES_TTL
        )
        self._competitions_cache: TTLCache = TTLCache(
            maxsize=16, ttl=settings.CACHE_COMPETITIONS_TTL
        )
        self._scores_cache: TTLCache = TTLCache(
            maxsize=500, ttl=settings.CACHE_SCORES_TTL
        )

        # Lock for thread safety
        self._lock = threading.RLock()

    def _get_cache(self, cache_type: str) -> TTLCache:
        """Get the appropriate cache based on type."""
        caches = {
            "profiles": self._profiles_cache,
            "competitions": self._competitions_cache,
            "scores": self._scores_cache,
        }
        if cache_type not in caches:
            raise ValueError(f"Unknown cache type: {cache_type}")
        return caches[cache_type]

    def get(self, key: str, cache_type: str = "scores") -> Optional[Any]:
        """Get a value from the cache.

        Args:
            key: The cache key
            cache_type: Type of cache (profiles, competitions, scores)

        Returns:
            Cached value or None if not found/expired
        """
        with self._lock:
            cache = self._get_cache(cache_type)
            value = cache.get(key)
            if value is not None:
                logger.debug(f"Cache hit: {cache_type}/{key}")
            return value

    def set(self, key: str, value: Any, cache_type: str = "scores") -> None:
        """Set a value in the cache."""
        with self._lock:
            cache = self._get_cache(cache_type)
            cache[key] = value

    def delete(self, key: str, cache_type: str = "scores") -> bool:
        """Delete a value from the cache.

        Returns:
            True if key was deleted, False if not found
        """
        with self._lock:
            cache = self._get_cache(cache_type)
            if key in cache:
                del cache[key]
                return True
            return False

    def clear(self, cache_type: Optional[str] = None) -> None:
        """Clear one cache, or all of them when cache_type is None."""
        with self._lock:
            if cache_type:
                self._get_cache(cache_type).clear()
            else:
                self._profiles_cache.clear()
                self._competitions_cache.clear()
                self._scores_cache.clear()

    def stats(self) -> dict[str, dict[str, int]]:
        """Get cache statistics.

        Returns:
            Dictionary with size and maxsize for each cache type
        """
        with self._lock:
            return {
                name: {"size": len(cache), "maxsize": cache.maxsize}
                for name, cache in [
                    ("profiles", self._profiles_cache),
                    ("competitions", self._competitions_cache),
                    ("scores", self._scores_cache),
                ]
            }
