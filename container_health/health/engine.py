"""Assessment engine — collect, normalize and classify one container."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from container_health.runtime.models import InspectResult, StatsSample

from .classifier import classify
from .metrics import cpu_percent, format_bytes, format_uptime, memory_percent
from .models import HealthRecord, RuntimeState

logger = logging.getLogger(__name__)


class Collector(Protocol):
    def list_containers(self) -> list[str]: ...

    def inspect(self, name: str) -> InspectResult: ...

    def sample_stats(self, name: str) -> StatsSample: ...


def assess(collector: Collector, name: str, now: float | None = None) -> HealthRecord:
    """Build a fresh HealthRecord for ``name``.

    Resource usage is only sampled for running containers; everything else
    reports zero usage. Raises ContainerNotFound / RuntimeUnavailable from the
    collector unchanged.
    """
    now = time.time() if now is None else now
    info = collector.inspect(name)
    state = RuntimeState.parse(info.state_string)

    runtime_id = info.runtime_id
    cpu = 0.0
    mem = 0.0
    usage = 0
    if state is RuntimeState.RUNNING:
        sample = collector.sample_stats(name)
        runtime_id = runtime_id or sample.runtime_id
        cpu = cpu_percent(
            sample.cpu_usage_total,
            sample.previous_cpu_usage_total,
            sample.system_cpu_delta,
            sample.per_cpu_count,
        )
        mem = memory_percent(sample.memory_usage_bytes, sample.memory_limit_bytes)
        usage = sample.memory_usage_bytes

    record = HealthRecord(
        id=runtime_id,
        name=name,
        state=state,
        status=classify(state, cpu, mem, info.restart_count),
        restart_count=info.restart_count,
        cpu_percent=round(cpu, 2),
        memory_usage=format_bytes(usage),
        memory_percent=round(mem, 2),
        uptime=format_uptime(state, info.started_at, now=now),
        last_updated=now,
    )
    logger.debug("Assessed %s: %s (%s)", name, record.status.value, state.value)
    return record
