"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from container_health.cache.store import LocalCache
from container_health.runtime.client import ContainerNotFound, RuntimeUnavailable
from container_health.runtime.models import InspectResult, StatsSample
from container_health.storage.store import HealthStore


class FakeClock:
    """Manually advanced clock, usable as a ``timer`` or ``clock`` callable."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRuntime:
    """In-memory stand-in for DockerClient that records every call."""

    def __init__(self) -> None:
        self.containers: dict[str, tuple[InspectResult, StatsSample]] = {}
        self.unreachable = False
        self.calls: list[tuple[str, str]] = []

    def add(
        self,
        name: str,
        state: str = "running",
        restart_count: int = 0,
        started_at: str = "2023-11-14T20:00:00.000000000Z",
        stats: StatsSample | None = None,
    ) -> None:
        info = InspectResult(
            state_string=state,
            restart_count=restart_count,
            started_at=started_at,
            runtime_id=f"{name}-id",
        )
        self.containers[name] = (info, stats or StatsSample())

    def _check(self, name: str | None = None) -> None:
        if self.unreachable:
            raise RuntimeUnavailable("Docker daemon unreachable")
        if name is not None and name not in self.containers:
            raise ContainerNotFound(name)

    def list_containers(self) -> list[str]:
        self.calls.append(("list", ""))
        self._check()
        return list(self.containers)

    def inspect(self, name: str) -> InspectResult:
        self.calls.append(("inspect", name))
        self._check(name)
        return self.containers[name][0]

    def sample_stats(self, name: str) -> StatsSample:
        self.calls.append(("stats", name))
        self._check(name)
        return self.containers[name][1]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def cache(clock: FakeClock) -> LocalCache:
    return LocalCache(timer=clock)


@pytest.fixture
def store(tmp_path: Path):
    """HealthStore backed by a temp SQLite file."""
    s = HealthStore(tmp_path / "test_monitor.db")
    yield s
    s.close()
