"""Cache-aside store for the latest HealthRecord of each container.

Two backends share one interface: RedisCache for a shared cache that outlives
the process, LocalCache (cachetools) for a single process. Entries expire only
by TTL or an explicit wipe.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

import redis
from cachetools import TLRUCache

from container_health.health.models import HealthRecord

logger = logging.getLogger(__name__)

KEY_PREFIX = "health-data:"
MAX_CACHE_ITEM = 1000


def cache_key(name: str) -> str:
    return f"{KEY_PREFIX}{name}"


class CacheUnavailable(Exception):
    """Raised when the cache backend can't be reached."""


class BaseCache(ABC):
    @abstractmethod
    def get(self, key: str) -> HealthRecord | None:
        pass

    @abstractmethod
    def set(self, key: str, record: HealthRecord, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    def wipe(self) -> int:
        """Drop every health entry; returns how many were removed."""

    def close(self) -> None:
        pass


class RedisCache(BaseCache):
    """Redis-backed cache — ``SET key payload EX ttl``."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisCache:
        return cls(redis.Redis.from_url(url))

    def get(self, key: str) -> HealthRecord | None:
        try:
            raw = self._client.get(key)
        except redis.RedisError as e:
            raise CacheUnavailable(f"Cache read failed: {e}") from e
        return HealthRecord.from_payload(raw)

    def set(self, key: str, record: HealthRecord, ttl_seconds: int) -> None:
        try:
            self._client.set(key, record.to_payload(), ex=ttl_seconds)
        except redis.RedisError as e:
            raise CacheUnavailable(f"Cache write failed: {e}") from e

    def wipe(self) -> int:
        try:
            keys = list(self._client.scan_iter(match=f"{KEY_PREFIX}*"))
            return self._client.delete(*keys) if keys else 0
        except redis.RedisError as e:
            raise CacheUnavailable(f"Cache wipe failed: {e}") from e

    def close(self) -> None:
        self._client.close()


class LocalCache(BaseCache):
    """In-process cache with a per-entry TTL."""

    def __init__(
        self,
        maxsize: int = MAX_CACHE_ITEM,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cache: TLRUCache = TLRUCache(maxsize=maxsize, ttu=_expires_at, timer=timer)

    def get(self, key: str) -> HealthRecord | None:
        entry = self.cache.get(key)
        if entry is None:
            return None
        _, payload = entry
        return HealthRecord.from_payload(payload)

    def set(self, key: str, record: HealthRecord, ttl_seconds: int) -> None:
        self.cache[key] = (ttl_seconds, record.to_payload())

    def wipe(self) -> int:
        keys = [k for k in list(self.cache.keys()) if k.startswith(KEY_PREFIX)]
        for k in keys:
            self.cache.pop(k, None)
        return len(keys)


def _expires_at(key: str, value: tuple[int, str], now: float) -> float:
    ttl_seconds, _ = value
    return now + ttl_seconds


def create_cache(backend: str, redis_url: str = "") -> BaseCache:
    """Build the configured cache backend ("redis" or "local")."""
    if backend == "local":
        return LocalCache()
    if backend == "redis":
        return RedisCache.from_url(redis_url)
    raise ValueError(f"Unknown cache backend: {backend}")
