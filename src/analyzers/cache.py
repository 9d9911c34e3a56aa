"""TTL caches for expensive sub-results."""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Generic, TypeVar

import redis.asyncio as redis
from pydantic import BaseModel, ValidationError
from redis.exceptions import RedisError

from config import settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class TTLCache(ABC, Generic[ModelT]):
    """
    Key/value cache whose entries expire a fixed time after being written.

    Concurrent writers race with last-writer-wins semantics.
    """

    ttl: float

    @abstractmethod
    async def get(self, key: str) -> ModelT | None:
        """Return the live entry for key, or None if absent or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: ModelT) -> None:
        """Store value under key, restarting its TTL."""
        pass


class MemoryTTLCache(TTLCache[ModelT]):
    """In-process cache. Hits return the very object that was stored."""

    def __init__(
        self,
        ttl: float = settings.pagespeed_cache_ttl,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[str, tuple[float, ModelT]] = {}

    async def get(self, key: str) -> ModelT | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self.clock() - stored_at >= self.ttl:
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: ModelT) -> None:
        self._entries[key] = (self.clock(), value)

    def __len__(self) -> int:
        return len(self._entries)


class RedisTTLCache(TTLCache[ModelT]):
    """
    Redis-backed cache shared between API processes and workers.

    Values are stored as JSON with a Redis-side expiry. Redis errors and
    entries that no longer validate are logged and treated as misses.
    """

    def __init__(
        self,
        client: redis.Redis,
        model: type[ModelT],
        ttl: float = settings.pagespeed_cache_ttl,
        prefix: str = "sitelens:",
    ):
        self.client = client
        self.model = model
        self.ttl = ttl
        self.prefix = prefix

    async def get(self, key: str) -> ModelT | None:
        try:
            raw = await self.client.get(self.prefix + key)
        except RedisError as e:
            logger.warning(f"Redis cache read failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return self.model.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable cache entry for {key}: {e}")
            return None

    async def set(self, key: str, value: ModelT) -> None:
        try:
            await self.client.set(
                self.prefix + key,
                value.model_dump_json(),
                ex=max(1, int(self.ttl)),
            )
        except RedisError as e:
            logger.warning(f"Redis cache write failed for {key}: {e}")


def build_cache(model: type[ModelT], prefix: str) -> TTLCache[ModelT]:
    """Create the cache selected by settings.cache_backend."""
    if settings.cache_backend == "redis":
        client = redis.Redis.from_url(settings.redis_url)
        return RedisTTLCache(client, model, prefix=prefix)
    return MemoryTTLCache()
