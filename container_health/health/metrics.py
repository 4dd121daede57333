"""Metrics normalizer — raw runtime counters to percentages and display units.

Pure functions, no I/O. Timestamps are Docker's RFC 3339 strings, which carry
nanosecond precision and a trailing ``Z``.
"""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone
from typing import Any

from .models import RuntimeState

logger = logging.getLogger(__name__)

BYTE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB")

_FRACTION_RE = re.compile(r"\.(\d+)")

# Docker reports never-started containers with the zero time
_ZERO_TIME = datetime(1970, 1, 1, tzinfo=timezone.utc)


class ParseError(ValueError):
    """Raised when a counter or timestamp from the runtime can't be read."""


# ── Parsing ──────────────────────────────────────────────────────────────────


def parse_counter(value: Any) -> int:
    """Read a non-negative integer counter."""
    if value is None or isinstance(value, bool):
        raise ParseError(f"Invalid counter: {value!r}")
    try:
        counter = int(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid counter: {value!r}") from e
    if counter < 0:
        raise ParseError(f"Negative counter: {value!r}")
    return counter


def parse_started_at(value: str) -> datetime:
    """Parse an RFC 3339 timestamp, trimming sub-microsecond digits."""
    if not value or not isinstance(value, str):
        raise ParseError(f"Invalid timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ParseError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ── Percentages ──────────────────────────────────────────────────────────────


def cpu_percent(
    cpu_usage_total: int,
    previous_cpu_usage_total: int,
    system_cpu_delta: int,
    per_cpu_count: int | None = None,
) -> float:
    """CPU usage across all cores; may exceed 100 on multi-core hosts."""
    cpu_delta = cpu_usage_total - previous_cpu_usage_total
    if system_cpu_delta <= 0 or cpu_delta <= 0:
        return 0.0
    num_cpus = per_cpu_count or 1
    return (cpu_delta / system_cpu_delta) * num_cpus * 100.0


def memory_percent(usage_bytes: int, limit_bytes: int) -> float:
    # A zero limit is read as 1 byte rather than dividing by zero
    return (usage_bytes / (limit_bytes or 1)) * 100.0


# ── Display units ────────────────────────────────────────────────────────────


def format_bytes(size: int | float) -> str:
    """Binary-scaled size: ``512B``, ``1.5KiB``, ``1.0GiB``."""
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{int(size)}B"
    return f"{value:.1f}{BYTE_UNITS[unit]}"


def format_duration(seconds: float) -> str:
    """Two largest non-zero units among days/hours/minutes, e.g. ``2d 3h``."""
    total_minutes = int(max(seconds, 0) // 60)
    days, rem = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(rem, 60)
    parts = [f"{n}{u}" for n, u in ((days, "d"), (hours, "h"), (minutes, "m")) if n]
    return " ".join(parts[:2]) if parts else "0m"


def format_uptime(state: RuntimeState, started_at: str, now: float | None = None) -> str:
    """Uptime for display; always ``0m`` for exited or dead containers."""
    if state in (RuntimeState.EXITED, RuntimeState.DEAD):
        return "0m"
    try:
        started = parse_started_at(started_at)
    except ParseError as e:
        logger.warning("Uptime unavailable: %s", e)
        return "0m"
    if started <= _ZERO_TIME:
        return "0m"
    now = time.time() if now is None else now
    return format_duration(now - started.timestamp())
