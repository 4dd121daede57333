"""Pydantic models for Docker Engine API responses."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from container_health.health.metrics import ParseError, parse_counter

logger = logging.getLogger(__name__)


def _counter(value: Any, field: str) -> int:
    try:
        return parse_counter(value)
    except ParseError as e:
        logger.warning("Defaulting %s to 0: %s", field, e)
        return 0


class InspectResult(BaseModel):
    state_string: str
    restart_count: int = 0
    started_at: str = ""
    runtime_id: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> InspectResult:
        """Build from ``GET /containers/{name}/json``."""
        state = payload.get("State") or {}
        return cls(
            state_string=str(state.get("Status", "")),
            restart_count=_counter(payload.get("RestartCount", 0), "restart_count"),
            started_at=str(state.get("StartedAt") or ""),
            runtime_id=str(payload.get("Id") or ""),
        )


class StatsSample(BaseModel):
    cpu_usage_total: int = 0
    previous_cpu_usage_total: int = 0
    system_cpu_delta: int = 0
    per_cpu_count: int | None = None
    memory_usage_bytes: int = 0
    memory_limit_bytes: int = 0
    runtime_id: str = ""

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> StatsSample:
        """Build from a single ``GET /containers/{name}/stats?stream=false`` sample."""
        cpu = payload.get("cpu_stats") or {}
        precpu = payload.get("precpu_stats") or {}
        memory = payload.get("memory_stats") or {}
        cpu_usage = cpu.get("cpu_usage") or {}
        precpu_usage = precpu.get("cpu_usage") or {}

        # precpu is empty on the first sample of a freshly started container
        system = _counter(cpu.get("system_cpu_usage", 0), "system_cpu_usage")
        previous_system = _counter(precpu.get("system_cpu_usage", 0), "previous_system_cpu_usage")

        per_cpu_count = None
        if cpu.get("online_cpus"):
            per_cpu_count = _counter(cpu["online_cpus"], "online_cpus") or None
        if not per_cpu_count:
            per_cpu_count = len(cpu_usage.get("percpu_usage") or []) or None

        return cls(
            cpu_usage_total=_counter(cpu_usage.get("total_usage", 0), "cpu_usage_total"),
            previous_cpu_usage_total=_counter(
                precpu_usage.get("total_usage", 0), "previous_cpu_usage_total",
            ),
            system_cpu_delta=system - previous_system,
            per_cpu_count=per_cpu_count,
            memory_usage_bytes=_counter(memory.get("usage", 0), "memory_usage_bytes"),
            memory_limit_bytes=_counter(memory.get("limit", 0), "memory_limit_bytes"),
            runtime_id=str(payload.get("id") or ""),
        )
