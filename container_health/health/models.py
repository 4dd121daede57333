"""Health models — runtime state, health verdict and the per-container record.

The cache payload is an explicit, versioned mapping rather than a dump of the
dataclass, so adding a field never breaks reading entries written earlier.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

PAYLOAD_VERSION = 1


class RuntimeState(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    PAUSED = "paused"
    RESTARTING = "restarting"
    EXITED = "exited"
    STOPPED = "stopped"
    REMOVING = "removing"
    DEAD = "dead"

    @classmethod
    def parse(cls, raw: str | None) -> RuntimeState:
        """Map the runtime's status string; anything unrecognised is STOPPED."""
        try:
            return cls((raw or "").strip().lower())
        except ValueError:
            logger.debug("Unknown runtime state %r, treating as stopped", raw)
            return cls.STOPPED

    @property
    def icon(self) -> str:
        return _STATE_ICONS[self]


_STATE_ICONS: dict[RuntimeState, str] = {
    RuntimeState.CREATED: "⚪",
    RuntimeState.RUNNING: "🟢",
    RuntimeState.PAUSED: "⚪",
    RuntimeState.RESTARTING: "⚪",
    RuntimeState.EXITED: "🔴",
    RuntimeState.STOPPED: "⚪",
    RuntimeState.REMOVING: "⚪",
    RuntimeState.DEAD: "🔴",
}


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    STALL = "stall"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS: dict[HealthStatus, str] = {
    HealthStatus.HEALTHY: "💚 Healthy",
    HealthStatus.UNHEALTHY: "🔴 Unhealthy",
    HealthStatus.STALL: "🟡 Stall",
}


@dataclass(frozen=True)
class HealthRecord:
    """Immutable health snapshot of one container."""

    id: str
    name: str
    state: RuntimeState
    status: HealthStatus
    restart_count: int = 0
    cpu_percent: float = 0.0
    memory_usage: str = "0B"
    memory_percent: float = 0.0
    uptime: str = "0m"
    last_updated: float = 0.0

    def __str__(self) -> str:
        return (
            f"{self.state.icon} {self.name} {self.state.value} | {self.status.label} | "
            f"CPU: {self.cpu_percent:.1f}% | Mem: {self.memory_usage} ({self.memory_percent:.1f}%) | "
            f"Restarts: {self.restart_count} | Up: {self.uptime}"
        )

    # ── Cache payload ────────────────────────────────────────────────────

    def to_payload(self) -> str:
        """Serialize to the versioned JSON cache payload."""
        return json.dumps({
            "v": PAYLOAD_VERSION,
            "id": self.id,
            "name": self.name,
            "state": self.state.value,
            "status": self.status.value,
            "restart_count": self.restart_count,
            "cpu_percent": self.cpu_percent,
            "memory_usage": self.memory_usage,
            "memory_percent": self.memory_percent,
            "uptime": self.uptime,
            "last_updated": self.last_updated,
        })

    @classmethod
    def from_payload(cls, raw: str | bytes | None) -> HealthRecord | None:
        """Rebuild a record from a cache payload; None if it can't be read."""
        if raw is None:
            return None
        try:
            data: dict[str, Any] = json.loads(raw)
            if data.get("v") != PAYLOAD_VERSION:
                logger.warning("Ignoring cache payload with version %r", data.get("v"))
                return None
            return cls(
                id=str(data.get("id", "")),
                name=str(data["name"]),
                state=RuntimeState.parse(data.get("state")),
                status=HealthStatus(data["status"]),
                restart_count=int(data.get("restart_count", 0)),
                cpu_percent=float(data.get("cpu_percent", 0.0)),
                memory_usage=str(data.get("memory_usage", "0B")),
                memory_percent=float(data.get("memory_percent", 0.0)),
                uptime=str(data.get("uptime", "0m")),
                last_updated=float(data.get("last_updated", 0.0)),
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Unreadable cache payload: %s", e)
            return None
