"""Watch scheduler — drives containers through cache lookup, assessment and write-through.

Containers are processed strictly one at a time, in the order given. A cache
hit is served as-is for the rest of its TTL; a miss is recomputed from the
runtime, written to the store, then cached. In watch mode the pass repeats
after a fixed interval until the process is terminated.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from container_health.cache.store import BaseCache, CacheUnavailable, cache_key
from container_health.runtime.client import ContainerNotFound
from container_health.storage.store import HealthStore

from .engine import Collector, assess
from .models import HealthRecord

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0  # seconds between passes; unrelated to the cache TTL


@dataclass
class PassResult:
    """Outcome of one pass over the monitored containers."""

    records: list[HealthRecord] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    cache_hits: int = 0


class WatchScheduler:
    """Runs passes over a container set using injected runtime, cache and store."""

    def __init__(
        self,
        collector: Collector,
        cache: BaseCache,
        store: HealthStore,
        cache_ttl: int,
        interval: float = DEFAULT_INTERVAL,
        on_record: Callable[[HealthRecord], Any] | None = None,
        on_skip: Callable[[str], Any] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.collector = collector
        self.cache = cache
        self.store = store
        self.cache_ttl = cache_ttl
        self.interval = interval
        self.on_record = on_record
        self.on_skip = on_skip
        self._sleep = sleep
        self._clock = clock
        self._last_updated: dict[str, float] = {}
        self.passes = 0

    def run(self, names: Sequence[str] | None = None, watch: bool = False) -> PassResult:
        """Run one pass, or repeat passes forever when ``watch`` is set.

        ``names=None`` re-lists every container from the runtime each pass.
        RuntimeUnavailable and StoreUnavailable propagate and end the run.
        """
        result = self.run_pass(names)
        while watch:
            self._sleep(self.interval)
            result = self.run_pass(names)
        return result

    def run_pass(self, names: Sequence[str] | None = None) -> PassResult:
        """One sequential pass over ``names`` (or the full runtime listing)."""
        targets = list(names) if names is not None else self.collector.list_containers()
        self.passes += 1
        logger.debug("Pass %d over %d containers", self.passes, len(targets))

        result = PassResult()
        for name in targets:
            record, cache_ok = self._lookup(name)
            if record is not None:
                result.cache_hits += 1
            else:
                try:
                    record = self._recompute(name)
                except ContainerNotFound:
                    logger.warning("Container %s not found, skipping", name)
                    result.skipped.append(name)
                    if self.on_skip:
                        self.on_skip(name)
                    continue
                self._write_through(record, cache_ok)

            result.records.append(record)
            self._emit(record)
        return result

    # ── Steps ─────────────────────────────────────────────────────────────

    def _lookup(self, name: str) -> tuple[HealthRecord | None, bool]:
        """Cached record (or None) and whether the cache answered at all."""
        try:
            return self.cache.get(cache_key(name)), True
        except CacheUnavailable as e:
            logger.warning("Cache unavailable for %s, recomputing: %s", name, e)
            return None, False

    def _recompute(self, name: str) -> HealthRecord:
        # Keeps last_updated non-decreasing even if the wall clock steps back
        now = max(self._clock(), self._last_updated.get(name, 0.0))
        record = assess(self.collector, name, now=now)
        self._last_updated[name] = record.last_updated
        return record

    def _write_through(self, record: HealthRecord, cache_ok: bool) -> None:
        """Persist first; only then make the record visible in the cache."""
        self.store.write(record)
        if not cache_ok:
            return
        try:
            self.cache.set(cache_key(record.name), record, self.cache_ttl)
        except CacheUnavailable as e:
            logger.warning("Cache write skipped for %s: %s", record.name, e)

    def _emit(self, record: HealthRecord) -> None:
        logger.info("%s: %s", record.name, record.status.value)
        if self.on_record:
            self.on_record(record)
