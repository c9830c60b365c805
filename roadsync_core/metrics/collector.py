"""RoadSync Metrics Collector - Strategy Metrics and Monitoring.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List

logger = logging.getLogger(__name__)


@dataclass
class SyncMetrics:
    """Strategy metrics snapshot.

    Attributes:
        local_hits: Queries answered without touching the target
        remote_fetches: Queries that waited on the target
        background_reloads: Queries refreshed after answering locally
        pushes: Updates forwarded to the target
        retries: Retries scheduled
        failures: Remote failures observed
        offline_transitions: Times the strategy went offline
        latency_avg_ms: Average remote latency
        latency_p99_ms: P99 remote latency
    """

    local_hits: int = 0
    remote_fetches: int = 0
    background_reloads: int = 0
    pushes: int = 0
    retries: int = 0
    failures: int = 0
    offline_transitions: int = 0
    latency_avg_ms: float = 0.0
    latency_p99_ms: float = 0.0

    @property
    def hit_rate(self) -> float:
        """Share of queries answered locally."""
        total = self.local_hits + self.remote_fetches + self.background_reloads
        return self.local_hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Metrics dictionary
        """
        return {
            "local_hits": self.local_hits,
            "remote_fetches": self.remote_fetches,
            "background_reloads": self.background_reloads,
            "pushes": self.pushes,
            "retries": self.retries,
            "failures": self.failures,
            "offline_transitions": self.offline_transitions,
            "hit_rate": self.hit_rate,
            "latency_avg_ms": self.latency_avg_ms,
            "latency_p99_ms": self.latency_p99_ms,
        }


class StrategyMetrics:
    """Counts the decisions a sync strategy makes.

    Example:
        metrics = StrategyMetrics()
        strategy = pessimistic_strategy("memory", "remote", metrics=metrics)
        ...
        print(metrics.to_prometheus())
    """

    def __init__(self, prefix: str = "roadsync", latency_samples: int = 10000):
        """Initialize collector.

        Args:
            prefix: Prometheus metric name prefix
            latency_samples: Remote latencies kept for percentiles
        """
        self.prefix = prefix
        self._local_hits = 0
        self._remote_fetches = 0
        self._background_reloads = 0
        self._pushes = 0
        self._retries = 0
        self._failures = 0
        self._offline_transitions = 0
        self._latencies: Deque[float] = deque(maxlen=latency_samples)
        self._exporters: List[Callable[[SyncMetrics], None]] = []

    def record_local_hit(self) -> None:
        self._local_hits += 1

    def record_remote_fetch(self) -> None:
        self._remote_fetches += 1

    def record_background_reload(self) -> None:
        self._background_reloads += 1

    def record_push(self) -> None:
        self._pushes += 1

    def record_retry(self) -> None:
        self._retries += 1

    def record_failure(self) -> None:
        self._failures += 1

    def record_offline(self) -> None:
        self._offline_transitions += 1

    def record_latency(self, ms: float) -> None:
        """Record remote call latency.

        Args:
            ms: Latency in milliseconds
        """
        self._latencies.append(ms)

    def _calculate_latency_avg(self) -> float:
        if not self._latencies:
            return 0.0
        return sum(self._latencies) / len(self._latencies)

    def _calculate_latency_p99(self) -> float:
        if not self._latencies:
            return 0.0

        sorted_latencies = sorted(self._latencies)
        idx = int(len(sorted_latencies) * 0.99)
        return sorted_latencies[min(idx, len(sorted_latencies) - 1)]

    def get_metrics(self) -> SyncMetrics:
        """Get current metrics.

        Returns:
            SyncMetrics snapshot
        """
        return SyncMetrics(
            local_hits=self._local_hits,
            remote_fetches=self._remote_fetches,
            background_reloads=self._background_reloads,
            pushes=self._pushes,
            retries=self._retries,
            failures=self._failures,
            offline_transitions=self._offline_transitions,
            latency_avg_ms=self._calculate_latency_avg(),
            latency_p99_ms=self._calculate_latency_p99(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return self.get_metrics().to_dict()

    def reset(self) -> None:
        """Reset all metrics."""
        self._local_hits = 0
        self._remote_fetches = 0
        self._background_reloads = 0
        self._pushes = 0
        self._retries = 0
        self._failures = 0
        self._offline_transitions = 0
        self._latencies.clear()

    def add_exporter(self, exporter: Callable[[SyncMetrics], None]) -> None:
        """Add metrics exporter.

        Args:
            exporter: Callback to receive metrics
        """
        self._exporters.append(exporter)

    def export(self) -> None:
        """Export metrics to all exporters."""
        metrics = self.get_metrics()
        for exporter in self._exporters:
            try:
                exporter(metrics)
            except Exception as e:
                logger.error(f"Exporter error: {e}")

    def to_prometheus(self) -> str:
        """Export metrics in Prometheus format.

        Returns:
            Prometheus-formatted metrics
        """
        metrics = self.get_metrics()
        p = self.prefix
        counters = [
            ("local_hits_total", "Queries answered locally", metrics.local_hits),
            ("remote_fetches_total", "Queries that waited on the target", metrics.remote_fetches),
            ("background_reloads_total", "Background refreshes", metrics.background_reloads),
            ("pushes_total", "Updates forwarded to the target", metrics.pushes),
            ("retries_total", "Retries scheduled", metrics.retries),
            ("failures_total", "Remote failures", metrics.failures),
            ("offline_transitions_total", "Transitions to offline", metrics.offline_transitions),
        ]

        lines: List[str] = []
        for name, help_text, value in counters:
            lines.extend([
                f"# HELP {p}_{name} {help_text}",
                f"# TYPE {p}_{name} counter",
                f"{p}_{name} {value}",
                "",
            ])
        lines.extend([
            f"# HELP {p}_hit_rate Share of queries answered locally",
            f"# TYPE {p}_hit_rate gauge",
            f"{p}_hit_rate {metrics.hit_rate:.4f}",
            "",
            f"# HELP {p}_remote_latency_avg_ms Average remote latency",
            f"# TYPE {p}_remote_latency_avg_ms gauge",
            f"{p}_remote_latency_avg_ms {metrics.latency_avg_ms:.2f}",
            "",
            f"# HELP {p}_remote_latency_p99_ms P99 remote latency",
            f"# TYPE {p}_remote_latency_p99_ms gauge",
            f"{p}_remote_latency_p99_ms {metrics.latency_p99_ms:.2f}",
        ])
        return "\n".join(lines)

    def __repr__(self) -> str:
        metrics = self.get_metrics()
        return f"StrategyMetrics(hits={metrics.local_hits}, hit_rate={metrics.hit_rate:.2%})"


class Timer:
    """Context manager timing a remote call."""

    def __init__(self, metrics: StrategyMetrics):
        """Initialize timer.

        Args:
            metrics: Collector receiving the latency
        """
        self._metrics = metrics
        self._start: float = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed_ms = (time.perf_counter() - self._start) * 1000
        self._metrics.record_latency(elapsed_ms)


__all__ = ["StrategyMetrics", "SyncMetrics", "Timer"]
