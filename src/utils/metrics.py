"""
Herald - Performance Metrics
============================

Lightweight counters and timings for the gate and the Twitch watcher.

DESIGN:
    Tracks timing metrics without significant overhead.
    Uses a rolling window to prevent unbounded memory growth.
    One collector is owned by AppContext; nothing here is global.
    Counters are flushed to the log on shutdown; exporting them to an
    external system is left to whoever reads get_summary().
"""

import time
from collections import Counter, defaultdict, deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Generator, List, Optional, Any

from src.core.logger import logger, LOG_TZ


# =============================================================================
# Constants
# =============================================================================

DEFAULT_WINDOW_SIZE = 100
"""Number of samples to keep per metric."""

SLOW_THRESHOLD_MS = 5000
"""Operations taking longer than this (ms) are logged as slow."""


# =============================================================================
# Metric Data Classes
# =============================================================================

@dataclass
class MetricSample:
    """Single metric sample."""
    value: float  # Duration in milliseconds
    timestamp: datetime = field(default_factory=lambda: datetime.now(LOG_TZ))


@dataclass
class MetricStats:
    """Aggregated statistics for a metric."""
    name: str
    count: int
    avg_ms: float
    min_ms: float
    max_ms: float
    p95_ms: float
    slow_count: int


# =============================================================================
# Metrics Collector
# =============================================================================

class MetricsCollector:
    """
    Collects counters and rolling-window timings.

    Attributes:
        metrics: Dictionary of metric name to sample deque.
        window_size: Maximum samples per metric.
        slow_threshold_ms: Samples above this are logged as slow.
    """

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        slow_threshold_ms: float = SLOW_THRESHOLD_MS,
    ) -> None:
        self.window_size = window_size
        self.metrics: Dict[str, deque] = defaultdict(lambda: deque(maxlen=self.window_size))
        self.slow_threshold_ms = slow_threshold_ms
        self._counters: Counter = Counter()
        self._start_time = datetime.now(LOG_TZ)

    def record(self, name: str, duration_ms: float) -> None:
        """
        Record a timing sample.

        Args:
            name: Metric name (e.g. "twitch.sweep").
            duration_ms: Duration in milliseconds.
        """
        self.metrics[name].append(MetricSample(value=duration_ms))

        if duration_ms > self.slow_threshold_ms:
            logger.warning("Slow Operation Detected", [
                ("Metric", name),
                ("Duration", f"{duration_ms:.0f}ms"),
                ("Threshold", f"{self.slow_threshold_ms:.0f}ms"),
            ])

    def increment(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters[name]

    def get_stats(self, name: str) -> Optional[MetricStats]:
        """
        Calculate statistics for a metric.

        Returns:
            MetricStats or None if no samples exist.
        """
        if not self.metrics.get(name):
            return None

        values: List[float] = sorted(s.value for s in self.metrics[name])
        count = len(values)
        p95_index = min(int(count * 0.95), count - 1)

        return MetricStats(
            name=name,
            count=count,
            avg_ms=sum(values) / count,
            min_ms=values[0],
            max_ms=values[-1],
            p95_ms=values[p95_index],
            slow_count=sum(1 for v in values if v > self.slow_threshold_ms),
        )

    def get_summary(self) -> Dict[str, Any]:
        """
        Get a summary of all metrics and counters.

        Returns:
            Dictionary with uptime, counters, and metric stats.
        """
        uptime = datetime.now(LOG_TZ) - self._start_time
        summary_metrics = {}
        for name in self.metrics:
            stats = self.get_stats(name)
            if stats is None:
                continue
            summary_metrics[name] = {
                "count": stats.count,
                "avg_ms": round(stats.avg_ms, 2),
                "p95_ms": round(stats.p95_ms, 2),
                "max_ms": round(stats.max_ms, 2),
                "slow_count": stats.slow_count,
            }
        return {
            "uptime_seconds": uptime.total_seconds(),
            "counters": dict(self._counters),
            "metrics": summary_metrics,
        }

    def flush(self) -> Dict[str, int]:
        """
        Log current counters and reset them.

        Returns:
            The counters as they were before the reset.
        """
        counters = dict(self._counters)
        items = [(name, str(value)) for name, value in sorted(counters.items())]
        logger.tree("Metrics Flushed", items or [("Counters", "None")], emoji="📊")
        self._counters.clear()
        return counters

    @contextmanager
    def timer(self, name: str) -> Generator[None, None, None]:
        """
        Context manager for timing operations.

        Example:
            with metrics.timer("twitch.sweep"):
                await watcher.sweep()
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(name, (time.perf_counter() - start) * 1000)


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    "MetricsCollector",
    "MetricSample",
    "MetricStats",
]
