import logging
from typing import Optional

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class CacheService:
    """Best-effort key/value cache on top of an async Redis client.

    With no client (Redis unavailable at request time) every call is a
    no-op that reports a miss, so callers always keep an authoritative
    database path behind it.
    """

    def __init__(self, redis_client: Optional[Redis] = None) -> None:
        self._redis: Optional[Redis] = redis_client

    async def get(self, key: str) -> Optional[str]:
        """Return the stored value for *key*, or ``None`` on miss/failure."""
        if self._redis is None:
            return None
        try:
            value = await self._redis.get(key)
        except Exception:
            logger.warning("Redis GET failed for key %s", key)
            return None
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        """Store *value*, optionally expiring after *ttl* seconds."""
        if self._redis is None:
            return
        try:
            if ttl:
                await self._redis.setex(key, ttl, value)
            else:
                await self._redis.set(key, value)
        except Exception:
            logger.warning("Redis SET failed for key %s", key)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (best-effort)."""
        if self._redis is None:
            return
        try:
            await self._redis.delete(key)
        except Exception:
            logger.warning("Redis DELETE failed for key %s", key)
