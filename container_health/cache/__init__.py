"""Cache-aside store — Redis or in-process TTL cache of HealthRecords."""

from .store import BaseCache, CacheUnavailable, LocalCache, RedisCache, cache_key, create_cache
