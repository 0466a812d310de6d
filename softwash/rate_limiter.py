"""
Hybrid in-memory + Redis rate limiting utilities
Redis is used when configured so limits hold across workers; otherwise counts stay in-process
"""

import logging
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from .config import (
    CONTACT_RATE_LIMIT,
    CONTACT_RATE_WINDOW,
    LOGIN_RATE_LIMIT,
    LOGIN_RATE_WINDOW,
    RATE_LIMIT_ENABLED,
)

logger = logging.getLogger(__name__)

# Redis connection
redis_client: Optional[redis.Redis] = None
_redis_failed = False

# In-memory fallback counters
# Format: {key: {'count': int, 'reset_time': float}}
memory_cache: dict[str, dict] = {}
cache_lock = Lock()

MEMORY_CACHE_CLEANUP_INTERVAL = 60
last_cleanup_time = 0.0


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or create the shared Redis client.
    Returns None when Redis is not configured or the first connection attempt failed,
    so callers fall back to process-local state.
    """
    global redis_client, _redis_failed

    if redis_client is not None:
        return redis_client
    if _redis_failed:
        return None

    redis_url = os.getenv("REDIS_URL")
    redis_host = os.getenv("REDIS_HOST")
    if not redis_url and not redis_host:
        logger.debug("Redis not configured - using in-memory state")
        _redis_failed = True
        return None

    try:
        if redis_url:
            if "@" in redis_url:
                url_parts = redis_url.split("@")
                protocol = url_parts[0].split(":")[0]
                masked_url = f"{protocol}:****@{url_parts[1]}"
            else:
                masked_url = "****"
            logger.info(f"📡 Using Redis URL connection: {masked_url}")
            client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
        else:
            client = redis.Redis(
                host=redis_host,
                port=int(os.getenv("REDIS_PORT", "6379")),
                password=os.getenv("REDIS_PASSWORD"),
                db=int(os.getenv("REDIS_DB", "0")),
                ssl=os.getenv("REDIS_SSL", "false").lower() == "true",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
        client.ping()
        redis_client = client
        logger.info("✅ Redis connected successfully")
    except Exception as e:
        logger.error(f"❌ Failed to connect to Redis: {str(e)}")
        logger.warning("⚠️ Falling back to in-memory rate limits, cache and tokens")
        _redis_failed = True
        return None

    return redis_client


def cleanup_expired_cache():
    """Remove expired entries from memory cache"""
    global last_cleanup_time
    now = time.time()
    if now - last_cleanup_time < MEMORY_CACHE_CLEANUP_INTERVAL:
        return
    with cache_lock:
        expired = [key for key, entry in memory_cache.items() if entry["reset_time"] <= now]
        for key in expired:
            del memory_cache[key]
    last_cleanup_time = now


def _hit_memory(key: str, window_seconds: int) -> int:
    now = time.time()
    with cache_lock:
        entry = memory_cache.get(key)
        if entry is None or entry["reset_time"] <= now:
            entry = {"count": 0, "reset_time": now + window_seconds}
            memory_cache[key] = entry
        entry["count"] += 1
        return entry["count"]


def _hit_redis(client: redis.Redis, key: str, window_seconds: int) -> int:
    count = client.incr(key)
    if count == 1:
        client.expire(key, window_seconds)
    return int(count)


def check_rate_limit(key: str, max_requests: int, window_seconds: int) -> bool:
    """
    Count one request against `key` and report whether it is within the limit.
    Fails open when Redis errors mid-request.
    """
    cleanup_expired_cache()
    client = get_redis_client()
    if client is not None:
        try:
            return _hit_redis(client, f"ratelimit:{key}", window_seconds) <= max_requests
        except Exception as e:
            logger.warning(f"⚠️ Redis rate limit check failed, allowing request: {e}")
            return True
    return _hit_memory(key, window_seconds) <= max_requests


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def rate_limit(scope: str, max_requests: int, window_seconds: int):
    """FastAPI dependency factory limiting requests per client IP for one endpoint scope"""

    async def dependency(request: Request):
        if not RATE_LIMIT_ENABLED:
            return
        key = f"{scope}:{get_client_ip(request)}"
        if not check_rate_limit(key, max_requests, window_seconds):
            logger.warning(f"⚠️ Rate limit exceeded for {key}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later.",
            )

    return dependency


rate_limit_login = rate_limit("admin_login", LOGIN_RATE_LIMIT, LOGIN_RATE_WINDOW)
rate_limit_contact = rate_limit("contact", CONTACT_RATE_LIMIT, CONTACT_RATE_WINDOW)
