"""
In-process telemetry helpers.

Nothing is shipped to an external backend: events go to the log and
counters/latencies stay in memory so the diagnostics endpoints and tests
can read them back.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("maritime_tracking.telemetry")

_COUNTERS: dict[str, int] = {}
_LATENCIES: dict[str, list[float]] = {}

# Samples kept per latency metric
_MAX_SAMPLES = 1000


def log_event(event_name: str, **fields: Any) -> None:
    """
    Structured log event. Callers must not pass tokens or passwords.

    Side Effects:
        - Writes to logger (info level)
    """
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """
    Increment an in-memory counter and emit a debug log.

    Side Effects:
        - Modifies _COUNTERS dict (in-memory state)
    """
    value = _COUNTERS.get(name, 0) + increment
    _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def get_counters(prefix: str = "") -> dict[str, int]:
    """Snapshot of counters whose name starts with ``prefix``."""
    return {name: value for name, value in _COUNTERS.items() if name.startswith(prefix)}


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """
    Time the wrapped block and record the sample under ``metric_name``.

    The sample is recorded even when the block raises.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("timing=%s seconds=%.6f", metric_name, elapsed)
        samples = _LATENCIES.setdefault(metric_name, [])
        samples.append(elapsed)
        if len(samples) > _MAX_SAMPLES:
            del samples[: len(samples) - _MAX_SAMPLES]


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """Min/max/avg/p50/p95 for a metric, zeros when nothing was recorded."""
    samples = _LATENCIES.get(metric_name, [])
    if not samples:
        return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0}

    ordered = sorted(samples)
    count = len(ordered)
    return {
        "count": count,
        "min": ordered[0],
        "max": ordered[-1],
        "avg": sum(ordered) / count,
        "p50": ordered[int(count * 0.50)],
        "p95": ordered[min(int(count * 0.95), count - 1)],
    }


def reset_telemetry() -> None:
    """Clear counters and latencies (tests)."""
    _COUNTERS.clear()
    _LATENCIES.clear()
