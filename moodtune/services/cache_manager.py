"""
Cache Management

File-based TTL cache for YouTube search results and video details, so that
repeated mood queries do not burn YouTube API quota.
"""

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from diskcache import Cache

logger = structlog.get_logger(__name__)


class CacheManager:
    """
    diskcache-backed cache manager with TTL support.

    Handles caching for:
    - YouTube search results (keyed by query and search options)
    - YouTube video details
    """

    def __init__(self, cache_dir: str = "data/cache"):
        """
        Initialize cache manager.

        Args:
            cache_dir: Directory for cache storage
        """
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self.caches = {
            "searches": Cache(str(self.cache_dir / "searches")),
            "videos": Cache(str(self.cache_dir / "videos")),
        }

        # Default TTL values (in seconds)
        self.default_ttl = {
            "searches": 12 * 3600,      # 12 hours
            "videos": 7 * 24 * 3600,    # 1 week
        }

        logger.info(
            "Cache manager initialized",
            cache_dir=str(self.cache_dir),
            cache_types=list(self.caches.keys())
        )

    def _generate_key(self, *args, **kwargs) -> str:
        key_data = {
            "args": args,
            "kwargs": sorted(kwargs.items())
        }
        key_str = json.dumps(key_data, sort_keys=True, default=str)
        return hashlib.md5(key_str.encode()).hexdigest()

    def get(self, cache_type: str, key: str, default: Any = None) -> Any:
        """
        Get value from cache.

        Cache errors are logged and treated as a miss.
        """
        if cache_type not in self.caches:
            logger.warning("Invalid cache type", cache_type=cache_type)
            return default

        try:
            value = self.caches[cache_type].get(key, default)
        except Exception as e:
            logger.error("Cache get failed", cache_type=cache_type, error=str(e))
            return default

        logger.debug(
            "Cache hit" if value is not default else "Cache miss",
            cache_type=cache_type,
            key=key[:16] + "..."
        )
        return value

    def set(self, cache_type: str, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache.

        Args:
            cache_type: Type of cache
            key: Cache key
            value: JSON-like value to cache
            ttl: Time to live in seconds (uses default if None)

        Returns:
            True if successful
        """
        if cache_type not in self.caches:
            logger.warning("Invalid cache type", cache_type=cache_type)
            return False

        if ttl is None:
            ttl = self.default_ttl.get(cache_type, 3600)

        try:
            self.caches[cache_type].set(key, value, expire=ttl)
        except Exception as e:
            logger.error("Cache set failed", cache_type=cache_type, error=str(e))
            return False

        logger.debug("Cache set", cache_type=cache_type, key=key[:16] + "...", ttl=ttl)
        return True

    def clear(self, cache_type: Optional[str] = None) -> bool:
        """Clear one cache, or all of them when cache_type is None."""
        if cache_type and cache_type not in self.caches:
            logger.warning("Invalid cache type", cache_type=cache_type)
            return False

        targets = [cache_type] if cache_type else list(self.caches)
        for name in targets:
            self.caches[name].clear()

        logger.info("Cache cleared", cache_types=targets)
        return True

    def get_stats(self) -> Dict[str, Dict[str, Any]]:
        return {
            name: {
                "size": len(cache),
                "volume": cache.volume(),
                "directory": str(cache.directory),
            }
            for name, cache in self.caches.items()
        }

    def close(self) -> None:
        for cache in self.caches.values():
            cache.close()

    # Convenience methods for specific cache types

    def get_search_results(self, query: str, **options) -> Optional[List[Dict[str, Any]]]:
        key = self._generate_key("search", query, **options)
        return self.get("searches", key)

    def cache_search_results(
        self,
        query: str,
        results: List[Dict[str, Any]],
        **options
    ) -> bool:
        key = self._generate_key("search", query, **options)
        return self.set("searches", key, results)

    def get_video_details(self, video_id: str) -> Optional[Dict[str, Any]]:
        return self.get("videos", self._generate_key("video", video_id))

    def cache_video_details(self, video_id: str, details: Dict[str, Any]) -> bool:
        return self.set("videos", self._generate_key("video", video_id), details)
