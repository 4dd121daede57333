"""Tests for health models and the versioned cache payload."""

from __future__ import annotations

import json
from dataclasses import FrozenInstanceError

import pytest

from container_health.health.models import (
    PAYLOAD_VERSION,
    HealthRecord,
    HealthStatus,
    RuntimeState,
)


def make_record(**overrides) -> HealthRecord:
    fields = dict(
        id="abc123",
        name="web",
        state=RuntimeState.RUNNING,
        status=HealthStatus.HEALTHY,
        restart_count=1,
        cpu_percent=12.5,
        memory_usage="200.0MiB",
        memory_percent=6.0,
        uptime="5h 12m",
        last_updated=1_700_000_000.0,
    )
    fields.update(overrides)
    return HealthRecord(**fields)


class TestRuntimeState:
    @pytest.mark.parametrize("raw", ["running", "RUNNING", " running\n"])
    def test_parse_known(self, raw: str) -> None:
        assert RuntimeState.parse(raw) is RuntimeState.RUNNING

    @pytest.mark.parametrize("raw", ["", None, "zombie", "up 5 minutes"])
    def test_unknown_is_stopped(self, raw: str | None) -> None:
        assert RuntimeState.parse(raw) is RuntimeState.STOPPED

    def test_icons(self) -> None:
        assert RuntimeState.RUNNING.icon == "🟢"
        assert RuntimeState.EXITED.icon == "🔴"
        assert RuntimeState.PAUSED.icon == "⚪"
        assert all(state.icon for state in RuntimeState)


class TestHealthStatus:
    def test_labels(self) -> None:
        assert HealthStatus.HEALTHY.label == "💚 Healthy"
        assert HealthStatus.UNHEALTHY.label == "🔴 Unhealthy"
        assert HealthStatus.STALL.label.endswith("Stall")


class TestHealthRecord:
    def test_immutable(self) -> None:
        r = make_record()
        with pytest.raises(FrozenInstanceError):
            r.cpu_percent = 99.0  # type: ignore[misc]

    def test_display(self) -> None:
        text = str(make_record())
        assert text.startswith("🟢 web running")
        assert "CPU: 12.5%" in text
        assert "Mem: 200.0MiB (6.0%)" in text
        assert "Up: 5h 12m" in text


class TestPayload:
    def test_round_trip(self) -> None:
        r = make_record()
        assert HealthRecord.from_payload(r.to_payload()) == r

    def test_accepts_bytes(self) -> None:
        r = make_record()
        assert HealthRecord.from_payload(r.to_payload().encode()) == r

    def test_explicit_version(self) -> None:
        data = json.loads(make_record().to_payload())
        assert data["v"] == PAYLOAD_VERSION
        assert data["state"] == "running"
        assert data["status"] == "healthy"

    def test_extra_fields_ignored(self) -> None:
        data = json.loads(make_record().to_payload())
        data["future_field"] = "x"
        assert HealthRecord.from_payload(json.dumps(data)) == make_record()

    def test_missing_optional_fields_default(self) -> None:
        payload = json.dumps({"v": PAYLOAD_VERSION, "name": "web", "status": "stall"})
        r = HealthRecord.from_payload(payload)
        assert r is not None
        assert r.state is RuntimeState.STOPPED
        assert r.uptime == "0m"
        assert r.memory_usage == "0B"

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "not json",
            "[1, 2]",
            json.dumps({"v": 99, "name": "web", "status": "healthy"}),
            json.dumps({"name": "web", "status": "healthy"}),
            json.dumps({"v": PAYLOAD_VERSION, "status": "healthy"}),
            json.dumps({"v": PAYLOAD_VERSION, "name": "web", "status": "sleepy"}),
        ],
    )
    def test_unreadable_is_none(self, raw: str | None) -> None:
        assert HealthRecord.from_payload(raw) is None
