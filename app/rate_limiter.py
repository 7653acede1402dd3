"""
Hybrid in-memory + Redis rate limiting for the public storefront endpoints

Counters live in process memory and are written through to Redis every few
seconds, so a burst against one worker costs a single Redis round trip.
"""

import logging
import os
import time
from threading import Lock
from typing import Optional

import redis
from fastapi import HTTPException, Request, status

from . import config

logger = logging.getLogger(__name__)

SYNC_INTERVAL_SECONDS = 10
CLEANUP_INTERVAL_SECONDS = 60

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get or create the Redis client from REDIS_URL or the REDIS_* settings"""
    global _redis_client

    if _redis_client is None:
        common = {
            "decode_responses": True,
            "socket_connect_timeout": 15,
            "socket_timeout": 30,
            "retry_on_timeout": True,
            "health_check_interval": 30,
            "max_connections": 20,
        }
        redis_url = os.getenv("REDIS_URL")
        if redis_url:
            client = redis.from_url(redis_url, **common)
            target = redis_url.split("@")[-1]
        else:
            host = os.getenv("REDIS_HOST", "localhost")
            port = int(os.getenv("REDIS_PORT", "6379"))
            client = redis.Redis(
                host=host,
                port=port,
                password=os.getenv("REDIS_PASSWORD") or None,
                db=int(os.getenv("REDIS_DB", "0")),
                ssl=os.getenv("REDIS_SSL", "false").lower() == "true",
                **common,
            )
            target = f"{host}:{port}"

        try:
            client.ping()
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis at {target}: {e}")
            raise
        logger.info(f"Redis connected for rate limiting at {target}")
        _redis_client = client

    return _redis_client


class HybridRateLimiter:
    """Fixed-window counter kept in memory and periodically mirrored to Redis"""

    def __init__(self, client: redis.Redis):
        self.client = client
        self._entries: dict[str, dict] = {}
        self._lock = Lock()
        self._last_cleanup = 0

    def _cleanup(self, now: int) -> None:
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        expired = [k for k, v in self._entries.items() if now >= v["reset_time"]]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f"Cleaned up {len(expired)} expired rate limit entries")
        self._last_cleanup = now

    def _load(self, key: str, window_seconds: int, now: int) -> dict:
        try:
            count = self.client.get(key)
            ttl = self.client.ttl(key)
        except redis.RedisError as e:
            logger.warning(f"Failed to load {key} from Redis, counting in memory only: {e}")
            count, ttl = None, -1

        if count and ttl > 0:
            return {"count": int(count), "reset_time": now + ttl, "last_sync": now}
        return {"count": 0, "reset_time": now + window_seconds, "last_sync": now}

    def hit(self, key: str, limit: int, window_seconds: int) -> tuple[bool, int, int]:
        """
        Count one request against ``key``.

        Returns:
            Tuple of (is_allowed, current_count, seconds_until_reset)
        """
        now = int(time.time())

        with self._lock:
            self._cleanup(now)

            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = self._load(key, window_seconds, now)

            if now >= entry["reset_time"]:
                entry.update(count=0, reset_time=now + window_seconds, last_sync=0)

            is_allowed = entry["count"] < limit
            if is_allowed:
                entry["count"] += 1

            if now - entry["last_sync"] >= SYNC_INTERVAL_SECONDS:
                try:
                    self.client.set(key, entry["count"], ex=window_seconds)
                    entry["last_sync"] = now
                except redis.RedisError as e:
                    logger.warning(f"Failed to sync {key} to Redis: {e}")

            return is_allowed, entry["count"], max(0, entry["reset_time"] - now)


_limiter: Optional[HybridRateLimiter] = None


def get_limiter() -> HybridRateLimiter:
    global _limiter
    if _limiter is None:
        _limiter = HybridRateLimiter(get_redis_client())
    return _limiter


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def create_rate_limiter(limit: int, window_seconds: int, key_prefix: str = "rate_limit"):
    """
    Create a per-IP rate limit dependency.

    Example:
        place_order_limit = create_rate_limiter(limit=20, window_seconds=60, key_prefix="orders")

        @router.post("/orders", dependencies=[Depends(place_order_limit)])
        async def place_order(...):
            ...
    """

    async def rate_limiter(request: Request):
        if not config.RATE_LIMIT_ENABLED:
            return

        key = f"{key_prefix}:{client_ip(request)}"
        try:
            is_allowed, count, ttl = get_limiter().hit(key, limit, window_seconds)
        except redis.RedisError as e:
            logger.error(f"Rate limiting unavailable, denying request: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Rate limiting service temporarily unavailable",
            ) from e

        if not is_allowed:
            logger.warning(f"Rate limit exceeded for {key} - {count}/{limit}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                headers={"Retry-After": str(ttl)},
            )

        request.state.rate_limit_remaining = limit - count

    return rate_limiter


place_order_limit = create_rate_limiter(limit=20, window_seconds=60, key_prefix="place_order")
public_lookup_limit = create_rate_limiter(limit=120, window_seconds=60, key_prefix="catalog_lookup")
