import json
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


def estimate_size(data: Any) -> int:
    """Rough size of a cached value in bytes, as serialized JSON"""
    return len(json.dumps(data, default=str).encode('utf-8'))


@dataclass
class CacheEntry:
    """Represents a cached value with the TTL it was stored under"""
    data: Any
    timestamp: float
    size_bytes: int
    ttl: int

    def age(self) -> float:
        """Returns how old this cache entry is in seconds"""
        return time.time() - self.timestamp

    def is_stale(self) -> bool:
        """Returns True if cache has exceeded its TTL"""
        return self.age() >= self.ttl

    def is_fresh(self) -> bool:
        """Returns True if cache is within its TTL"""
        return self.age() < self.ttl

    def expires_in(self) -> int:
        return int(self.ttl - self.age())


class CacheManager:
    """Keyed TTL cache for sheet snapshots and settings values"""

    def __init__(self, default_ttl: int = 300):
        self.default_ttl = default_ttl
        self._cache: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get a cache entry, or None if not cached"""
        return self._cache.get(key)

    def get_fresh(self, key: str) -> Optional[Any]:
        """Get cached data if present and within its TTL, else None"""
        cached = self._cache.get(key)
        if cached and cached.is_fresh():
            return cached.data
        return None

    def has(self, key: str) -> bool:
        """Check if a key is cached"""
        return key in self._cache

    def set(self, key: str, data: Any, ttl: Optional[int] = None, size_bytes: Optional[int] = None):
        """Create or replace a cache entry"""
        self._cache[key] = CacheEntry(
            data=data,
            timestamp=time.time(),
            size_bytes=estimate_size(data) if size_bytes is None else size_bytes,
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def invalidate(self, key: Optional[str] = None):
        """Invalidate cache. If key is None, invalidates all."""
        if key:
            if key in self._cache:
                del self._cache[key]
                print(f"[CACHE] 🗑️ Cache invalidated for '{key}'")
        else:
            self._cache.clear()
            print("[CACHE] 🗑️ All cache invalidated")

    def keys(self) -> List[str]:
        """Get list of cached keys"""
        return list(self._cache.keys())

    def items(self):
        """Iterate over (key, CacheEntry) pairs"""
        return self._cache.items()

    def describe(self) -> Dict[str, Dict[str, Any]]:
        """Age and expiry details for every entry, for the metrics endpoint"""
        return {
            key: {
                'age_seconds': int(cached.age()),
                'ttl_seconds': cached.ttl,
                'expires_in': cached.expires_in(),
                'size_bytes': cached.size_bytes,
            }
            for key, cached in self._cache.items()
        }

    def clear(self):
        """Clear all cache entries"""
        self._cache.clear()
