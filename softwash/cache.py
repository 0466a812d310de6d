"""
Caching utilities for frequently read data
Redis when configured, otherwise a process-local TTL store
"""
import json
import logging
import time
from threading import Lock
from typing import Any, Optional

from .rate_limiter import get_redis_client

logger = logging.getLogger(__name__)


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self):
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if self.redis_client is None:
            self.redis_client = get_redis_client()
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False


class MemoryCache:
    """Process-local cache with per-entry expiry"""

    def __init__(self, clock=time.monotonic):
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = Lock()
        self._clock = clock

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)
        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class PricingCache:
    """
    Read-through cache for the public pricing catalog.

    Entries live for `ttl` seconds and are dropped explicitly through
    `invalidate()` whenever a price, duration or percent changes. Both the
    local store and Redis (if configured) are cleared so other workers see
    the change on their next read.
    """

    KEY = "pricing:catalog"

    def __init__(self, ttl: int, shared: Optional[Cache] = None, local: Optional[MemoryCache] = None):
        self.ttl = ttl
        self.shared = shared
        self.local = local or MemoryCache()

    def get(self) -> Optional[dict]:
        value = self.local.get(self.KEY)
        if value is not None:
            return value
        if self.shared is not None:
            value = self.shared.get(self.KEY)
            if value is not None:
                self.local.set(self.KEY, value, self.ttl)
        return value

    def set(self, catalog: dict) -> None:
        self.local.set(self.KEY, catalog, self.ttl)
        if self.shared is not None:
            self.shared.set(self.KEY, catalog, self.ttl)

    def invalidate(self) -> None:
        self.local.delete(self.KEY)
        if self.shared is not None:
            self.shared.delete(self.KEY)
        logger.info("🗑️ Pricing cache invalidated")


# Global cache instance
cache = Cache()
