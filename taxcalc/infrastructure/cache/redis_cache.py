"""Redis-backed cache-aside layer with JSON payloads and mandatory TTLs"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar

from redis.exceptions import RedisError

from taxcalc.domain.exceptions import CacheExpirationFailedError, CacheStoreFailedError
from taxcalc.infrastructure.observability.metrics import cache_lookup_counter

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheStore(Protocol):
    """The subset of redis.asyncio.Redis this layer relies on"""

    async def get(self, name: str) -> Any: ...

    async def set(self, name: str, value: Any) -> Any: ...

    async def expire(self, name: str, time: int) -> Any: ...


@dataclass
class CacheLookup:
    """Outcome of a cache read"""

    hit: bool
    value: Any = None
    decoded: bool = True  # False when the stored payload was not valid JSON


class RedisCache:
    """Cache-aside wrapper around a Redis connection"""

    def __init__(self, client: CacheStore, ttl_seconds: int = 60 * 60):
        self.client = client
        self.ttl_seconds = ttl_seconds

    async def get(self, key: str) -> CacheLookup:
        """
        Read and decode a cached value.

        Store errors degrade to a miss. A payload that is not valid JSON is
        returned raw with decoded=False.
        """
        try:
            raw = await self.client.get(key)
        except RedisError as e:
            logger.warning("Cache read failed", extra={"cache_key": key, "error": str(e)})
            cache_lookup_counter.labels(outcome="miss").inc()
            return CacheLookup(hit=False)

        if not raw:
            cache_lookup_counter.labels(outcome="miss").inc()
            return CacheLookup(hit=False)

        try:
            value = json.loads(raw)
        except (TypeError, ValueError):
            cache_lookup_counter.labels(outcome="undecodable").inc()
            return CacheLookup(hit=True, value=raw, decoded=False)

        cache_lookup_counter.labels(outcome="hit").inc()
        return CacheLookup(hit=True, value=value)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """
        Store a JSON-encoded value and set its expiration.

        Raises:
            CacheStoreFailedError: The value could not be written
            CacheExpirationFailedError: The value was written but has no TTL
        """
        if ttl is None:
            ttl = self.ttl_seconds
        payload = json.dumps(value)

        try:
            await self.client.set(key, payload)
        except RedisError as e:
            raise CacheStoreFailedError(f"Failed to store cache key '{key}': {e}") from e

        try:
            applied = await self.client.expire(key, ttl)
        except RedisError as e:
            raise CacheExpirationFailedError(f"Failed to set TTL on cache key '{key}': {e}") from e

        if not applied:
            raise CacheExpirationFailedError(f"Cache key '{key}' was stored without a TTL")

    async def get_or_fetch(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        ttl: Optional[int] = None,
    ) -> T:
        """Return the cached value for key, or run loader and cache its result"""
        cached = await self.get(key)
        if cached.hit and cached.decoded:
            return cached.value

        if cached.hit:
            logger.warning("Ignoring undecodable cache entry", extra={"cache_key": key})

        value = await loader()
        await self.set(key, value, ttl)
        return value
