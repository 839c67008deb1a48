"""In-memory metrics for TuneCast.

Counters and duration samples for the decision and learning paths. The
store is thread-safe and process-local. Each duration series keeps only
its most recent MAX_DURATION_SAMPLES samples.
"""

from __future__ import annotations

import threading
import time
from collections import Counter, deque
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from typing import Any

MAX_DURATION_SAMPLES = 1000

# Metric names
POLICY_COMPUTED = "policy.computed"
POLICY_DEFERRED = "policy.deferred"
POLICY_FAST_EXIT = "policy.fast_exit"
POLICY_COMPUTE_DURATION = "policy.compute"
RULE_FAULTS = "rule.faults"
LEARNING_UPDATES = "learning.updates"
LEARNING_LOST_UPDATES = "learning.lost_updates"
LEARNING_RECALIBRATIONS = "learning.recalibrations"


def series_key(name: str, labels: Mapping[str, str]) -> str:
    """Return the storage key for a metric name and its labels.

    Labels are sorted, so rule.faults with rule=hdr is always
    "rule.faults{rule=hdr}".
    """
    if not labels:
        return name
    rendered = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
    return f"{name}{{{rendered}}}"


class _DurationWindow:
    """Rolling window of duration samples for one series."""

    def __init__(self) -> None:
        self.samples: deque[float] = deque(maxlen=MAX_DURATION_SAMPLES)

    def add(self, seconds: float) -> None:
        self.samples.append(seconds)

    def summary(self) -> dict[str, float | int]:
        count = len(self.samples)
        return {
            "count": count,
            "avg_seconds": sum(self.samples) / count,
            "max_seconds": max(self.samples),
            "min_seconds": min(self.samples),
        }


class MetricsStore:
    """Thread-safe in-memory metrics storage.

    Access the process-wide instance through get_metrics_store().
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Counter[str] = Counter()
        self._windows: dict[str, _DurationWindow] = {}

    def increment_counter(self, name: str, value: int = 1, **labels: str) -> None:
        """Increment a counter metric.

        Args:
            name: Metric name (e.g., 'policy.computed').
            value: Amount to increment (default: 1).
            **labels: Optional labels (e.g., rule='hdr').
        """
        key = series_key(name, labels)
        with self._lock:
            self._counters[key] += value

    def get_counter(self, name: str, **labels: str) -> int:
        """Return the current value of a counter (0 if never incremented)."""
        with self._lock:
            return self._counters[series_key(name, labels)]

    def record_duration(self, name: str, duration_seconds: float, **labels: str) -> None:
        """Record a duration measurement in seconds."""
        key = series_key(name, labels)
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                window = self._windows[key] = _DurationWindow()
            window.add(duration_seconds)

    def get_summary(self) -> dict[str, Any]:
        """Return counters and duration stats as a JSON-serializable dict."""
        with self._lock:
            return {
                "counters": {k: v for k, v in self._counters.items() if v},
                "durations": {
                    key: window.summary()
                    for key, window in self._windows.items()
                    if window.samples
                },
            }

    def clear(self) -> None:
        """Clear all metrics (for testing)."""
        with self._lock:
            self._counters.clear()
            self._windows.clear()


_metrics_store = MetricsStore()


def get_metrics_store() -> MetricsStore:
    """Get the process-wide metrics store."""
    return _metrics_store


def increment_counter(name: str, value: int = 1, **labels: str) -> None:
    """Increment a counter in the global store."""
    _metrics_store.increment_counter(name, value, **labels)


@contextmanager
def record_duration(name: str, **labels: str) -> Generator[None, None, None]:
    """Time the enclosed block into the global store.

    Usage:
        with record_duration(POLICY_COMPUTE_DURATION):
            policy = engine.compute(client, media)
    """
    start = time.monotonic()
    try:
        yield
    finally:
        _metrics_store.record_duration(name, time.monotonic() - start, **labels)


def get_metrics_summary() -> dict[str, Any]:
    """Get metrics summary from the global store."""
    return _metrics_store.get_summary()
