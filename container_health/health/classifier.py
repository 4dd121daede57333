"""Health classifier — deterministic verdict from state and resource usage."""

from __future__ import annotations

from .models import HealthStatus, RuntimeState

MAX_RESTARTS = 5
CPU_THRESHOLD = 80.0
MEMORY_THRESHOLD = 80.0


def classify(
    state: RuntimeState,
    cpu_percent: float,
    memory_percent: float,
    restart_count: int,
) -> HealthStatus:
    """Running containers are judged on load, stopped ones are unhealthy.

    Anything in between (paused, restarting, created...) is a stall.
    """
    if state is RuntimeState.RUNNING:
        if (
            restart_count > MAX_RESTARTS
            or cpu_percent > CPU_THRESHOLD
            or memory_percent > MEMORY_THRESHOLD
        ):
            return HealthStatus.UNHEALTHY
        return HealthStatus.HEALTHY
    if state in (RuntimeState.EXITED, RuntimeState.DEAD):
        return HealthStatus.UNHEALTHY
    return HealthStatus.STALL
