"""Text cache for extracted PDF content.

Entries are keyed by source URL and expire after a fixed TTL. A miss only
costs a re-download; it never changes a result.
"""
import logging
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from src.jangatub.core.config import settings

logger = logging.getLogger(__name__)


class TextCache(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...


class InMemoryTTLCache(TextCache):
    """Per-process cache. Expired entries are dropped on read."""

    def __init__(self, max_entries: int = 256, clock=time.monotonic):
        self._entries: dict[str, tuple[float, str]] = {}
        self._max_entries = max_entries
        self._clock = clock

    async def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if len(self._entries) >= self._max_entries and key not in self._entries:
            # evict the entry closest to expiry
            oldest = min(self._entries, key=lambda k: self._entries[k][0])
            self._entries.pop(oldest, None)
        self._entries[key] = (self._clock() + ttl_seconds, value)

    def __len__(self) -> int:
        return len(self._entries)


class RedisTextCache(TextCache):
    """Cache shared between workers."""

    def __init__(self, client: redis.Redis, prefix: str = "pdftext:"):
        self._client = client
        self._prefix = prefix

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(self._prefix + key)
        except RedisError as e:
            logger.warning(f"Text cache read failed: {e}")
            return None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(self._prefix + key, value, ex=ttl_seconds)
        except RedisError as e:
            logger.warning(f"Text cache write failed: {e}")


@lru_cache(maxsize=1)
def get_text_cache() -> TextCache:
    """Cache selected by configuration: Redis when REDIS_URL is set, else in-process."""
    if settings.REDIS_URL:
        logger.info("Using Redis text cache")
        return RedisTextCache(redis.Redis.from_url(settings.REDIS_URL, decode_responses=True))
    return InMemoryTTLCache()
