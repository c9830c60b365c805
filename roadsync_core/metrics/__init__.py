"""Metrics module - Strategy metrics collection."""

from roadsync_core.metrics.collector import StrategyMetrics, SyncMetrics, Timer

__all__ = ["StrategyMetrics", "SyncMetrics", "Timer"]
