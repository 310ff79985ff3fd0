"""Result cache for extraction / merge calls - Redis or in-memory with TTL."""
import hashlib
import json
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

import redis

logger = logging.getLogger(__name__)


class CacheBackend:
    """Abstract cache interface."""

    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any, ttl: float = 30.0):
        raise NotImplementedError

    def delete(self, key: str):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    def evict_expired(self, max_age: float) -> int:
        """Remove entries older than ``max_age`` seconds; returns how many were removed."""
        raise NotImplementedError


class RedisCache(CacheBackend):
    """Redis-backed cache (shared across workers, TTL enforced server side)."""

    def __init__(self, client: "redis.Redis"):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        # Test connection
        client.ping()
        logger.info(f"✅ Redis cache connected: {url.rsplit('@', 1)[-1]}")
        return cls(client)

    def get(self, key: str) -> Optional[Any]:
        try:
            value = self.client.get(key)
            if value:
                logger.debug(f"Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"Cache MISS: {key}")
            return None
        except Exception as e:
            logger.warning(f"Redis GET error: {e}")
            return None

    def set(self, key: str, value: Any, ttl: float = 30.0):
        try:
            # SETEX wants whole seconds; round up so short TTLs never become 0
            self.client.setex(key, max(1, int(ttl + 0.999)), json.dumps(value))
            logger.debug(f"Cache SET: {key} (TTL: {ttl}s)")
        except Exception as e:
            logger.warning(f"Redis SET error: {e}")

    def delete(self, key: str):
        try:
            self.client.delete(key)
        except Exception as e:
            logger.warning(f"Redis DELETE error: {e}")

    def clear(self):
        try:
            self.client.flushdb()
            logger.info("Redis cache cleared")
        except Exception as e:
            logger.warning(f"Redis CLEAR error: {e}")

    def evict_expired(self, max_age: float) -> int:
        # Redis expires keys itself
        return 0


class InMemoryCache(CacheBackend):
    """
    In-process cache with per-entry TTL and size-bounded eviction.

    Entries older than their TTL read as misses. ``evict_expired`` drops
    entries by age; callers decide when to sweep. Safe for concurrent use
    (last write wins).
    """

    def __init__(self, max_size: int = 1000, clock: Callable[[], float] = time.monotonic):
        self._entries: Dict[str, Tuple[float, float, Any]] = {}  # key -> (created, ttl, value)
        self._max_size = max_size
        self._clock = clock
        self._lock = threading.Lock()
        logger.info(f"✅ In-memory cache initialized (max_size={max_size})")

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache MISS: {key}")
            return None

        created, ttl, value = entry
        if self._clock() - created >= ttl:
            logger.debug(f"Cache STALE: {key}")
            return None

        logger.debug(f"Cache HIT: {key}")
        return value

    def set(self, key: str, value: Any, ttl: float = 30.0):
        with self._lock:
            # If full, drop the oldest insertion
            if key not in self._entries and len(self._entries) >= self._max_size:
                oldest_key = next(iter(self._entries))
                del self._entries[oldest_key]
            self._entries[key] = (self._clock(), ttl, value)
            size = len(self._entries)
        logger.debug(f"Cache SET: {key} (size: {size})")

    def delete(self, key: str):
        with self._lock:
            self._entries.pop(key, None)

    def clear(self):
        with self._lock:
            self._entries.clear()
        logger.info("In-memory cache cleared")

    def evict_expired(self, max_age: float) -> int:
        now = self._clock()
        with self._lock:
            stale = [key for key, (created, _, _) in self._entries.items() if now - created > max_age]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Evicted {len(stale)} cache entries older than {max_age}s")
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


def build_cache(redis_url: Optional[str] = None, max_size: int = 1000) -> CacheBackend:
    """
    Build the result cache.

    Priority:
    1. Redis (if a URL is configured and reachable)
    2. In-memory fallback
    """
    if redis_url:
        try:
            return RedisCache.from_url(redis_url)
        except Exception as e:
            logger.warning(f"Failed to connect to Redis: {e}. Using in-memory cache.")

    return InMemoryCache(max_size=max_size)


def generate_cache_key(prefix: str, *parts: Any) -> str:
    """
    Generate a stable cache key from arguments.

    Example:
        generate_cache_key("extraction", "We need a designer", "")
        -> "extraction:hash_of_parts"
    """
    combined = "|".join(str(part) for part in parts)

    # Hash for fixed-length key
    hash_str = hashlib.md5(combined.encode("utf-8")).hexdigest()[:16]

    return f"{prefix}:{hash_str}"
