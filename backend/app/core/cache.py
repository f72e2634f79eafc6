"""
Caching layer for the employee records service.
Uses Redis for distributed caching with fallback to an in-memory cache.

The service never talks to a backend directly: it receives a RegionCache,
which partitions keys into named regions ("employees", "employee" and
"highEarners"). Each region is evicted without touching the others.
"""

import asyncio
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger("employees.cache")


class CacheRegion:
    """Named cache regions used by the employee service."""
    EMPLOYEES = "employees"        # list of all employees, single key
    EMPLOYEE = "employee"          # one employee per id
    HIGH_EARNERS = "highEarners"   # filtered list per salary threshold


# Key under which the full employee list lives in the EMPLOYEES region
ALL_EMPLOYEES_KEY = "all"


class CacheBackend:
    """String-valued key/value store with optional per-key TTL in seconds."""

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError

    async def clear_pattern(self, pattern: str) -> int:
        """Delete keys matching a glob ending in "*"; returns how many went."""
        raise NotImplementedError

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemoryCache(CacheBackend):
    """
    Process-local LRU cache for single-instance deployments and tests.
    """

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self._entries: OrderedDict[str, tuple[str, Optional[float]]] = OrderedDict()
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._live(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        async with self._lock:
            expires_at = time.monotonic() + ttl if ttl else None
            self._entries[key] = (value, expires_at)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def clear_pattern(self, pattern: str) -> int:
        # Only trailing-wildcard patterns are produced by RegionCache
        prefix = pattern.rstrip("*")
        async with self._lock:
            doomed = [k for k in self._entries if k.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)


class RedisCache(CacheBackend):
    """
    Redis-backed cache shared by all service instances.

    Redis errors never reach the caller: reads degrade to misses and writes
    report False, so an outage only costs database round trips.
    """

    def __init__(self, url: str):
        self.url = url
        self._client: Optional[redis.Redis] = None

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=5.0,
                socket_connect_timeout=5.0,
            )
        return self._client

    async def _run(self, op: str, call: Callable[[redis.Redis], Awaitable[Any]], fallback: Any) -> Any:
        try:
            return await call(self._get_client())
        except RedisError as e:
            logger.error(f"Redis {op} failed: {e}")
            return fallback

    async def get(self, key: str) -> Optional[str]:
        return await self._run("GET", lambda r: r.get(key), None)

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        if ttl:
            return bool(await self._run("SETEX", lambda r: r.setex(key, ttl, value), False))
        return bool(await self._run("SET", lambda r: r.set(key, value), False))

    async def delete(self, key: str) -> bool:
        return await self._run("DEL", lambda r: r.delete(key), 0) > 0

    async def clear_pattern(self, pattern: str) -> int:
        async def scan_and_delete(r: redis.Redis) -> int:
            keys = [key async for key in r.scan_iter(match=pattern)]
            return await r.delete(*keys) if keys else 0

        return await self._run("SCAN/DEL", scan_and_delete, 0)

    async def ping(self) -> bool:
        return bool(await self._run("PING", lambda r: r.ping(), False))

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class RegionCache:
    """
    Region-partitioned JSON cache on top of a CacheBackend.

    Keys are laid out as "<namespace>:<region>::<key>" so that a whole region
    can be evicted with one pattern without touching its neighbours.
    """

    def __init__(
        self,
        backend: CacheBackend,
        namespace: Optional[str] = None,
        ttl: Optional[int] = None,
    ):
        self.backend = backend
        self.namespace = namespace if namespace is not None else settings.CACHE_KEY_PREFIX
        self.ttl = ttl if ttl is not None else (settings.CACHE_TTL_SECONDS or None)

    def _key(self, region: str, key: Any) -> str:
        return f"{self.namespace}:{region}::{key}"

    async def get(self, region: str, key: Any) -> Optional[Any]:
        raw = await self.backend.get(self._key(region, key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding undecodable cache entry {region}/{key}")
            await self.backend.delete(self._key(region, key))
            return None

    async def put(self, region: str, key: Any, value: Any) -> None:
        await self.backend.set(self._key(region, key), json.dumps(value, default=str), self.ttl)

    async def evict(self, region: str, key: Any) -> None:
        await self.backend.delete(self._key(region, key))

    async def evict_region(self, region: str) -> int:
        count = await self.backend.clear_pattern(f"{self.namespace}:{region}::*")
        logger.debug(f"Evicted {count} entries from cache region '{region}'")
        return count


# Global cache instance
_cache: Optional[CacheBackend] = None


async def get_cache() -> CacheBackend:
    """Get the process-wide cache backend, connecting on first use."""
    global _cache
    if _cache is None:
        if settings.REDIS_URL:
            backend = RedisCache(settings.REDIS_URL)
            if await backend.ping():
                _cache = backend
            else:
                logger.warning("Redis unavailable, using in-memory cache")
                _cache = InMemoryCache()
        else:
            logger.info("No REDIS_URL configured, using in-memory cache")
            _cache = InMemoryCache()
    return _cache


async def get_region_cache() -> RegionCache:
    return RegionCache(await get_cache())


async def close_cache() -> None:
    global _cache
    if _cache is not None:
        await _cache.close()
        _cache = None
