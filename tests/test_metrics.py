"""Tests for strategy metrics.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import logging

import pytest

from roadsync_core.metrics.collector import StrategyMetrics, Timer


class TestStrategyMetrics:
    """Tests for StrategyMetrics."""

    def test_counters(self):
        """Test counters and hit rate."""
        metrics = StrategyMetrics()
        metrics.record_local_hit()
        metrics.record_local_hit()
        metrics.record_local_hit()
        metrics.record_remote_fetch()
        metrics.record_push()
        metrics.record_retry()
        metrics.record_failure()
        metrics.record_offline()

        snapshot = metrics.get_metrics()

        assert snapshot.local_hits == 3
        assert snapshot.remote_fetches == 1
        assert snapshot.hit_rate == 0.75
        assert snapshot.to_dict()["offline_transitions"] == 1

    def test_empty_hit_rate(self):
        """Test hit rate without queries."""
        assert StrategyMetrics().get_metrics().hit_rate == 0.0

    def test_latency(self):
        """Test latency average and percentile."""
        metrics = StrategyMetrics()
        for ms in range(1, 101):
            metrics.record_latency(float(ms))

        snapshot = metrics.get_metrics()

        assert snapshot.latency_avg_ms == 50.5
        assert snapshot.latency_p99_ms == 100.0

    def test_timer(self):
        """Test the timer records one sample."""
        metrics = StrategyMetrics()

        with Timer(metrics):
            pass

        assert metrics.get_metrics().latency_avg_ms >= 0.0
        assert len(metrics._latencies) == 1

    def test_reset(self):
        """Test reset zeroes everything."""
        metrics = StrategyMetrics()
        metrics.record_push()
        metrics.record_latency(5.0)

        metrics.reset()

        assert metrics.to_dict()["pushes"] == 0
        assert metrics.get_metrics().latency_avg_ms == 0.0

    def test_prometheus(self):
        """Test Prometheus text output."""
        metrics = StrategyMetrics(prefix="app")
        metrics.record_local_hit()

        text = metrics.to_prometheus()

        assert "# TYPE app_local_hits_total counter" in text
        assert "app_local_hits_total 1" in text
        assert "app_hit_rate 1.0000" in text
        assert "app_remote_latency_avg_ms 0.00" in text

    def test_exporters(self, caplog):
        """Test exporter failures are logged and do not stop others."""
        metrics = StrategyMetrics()
        received = []

        def broken(snapshot):
            raise RuntimeError("sink down")

        metrics.add_exporter(broken)
        metrics.add_exporter(received.append)

        with caplog.at_level(logging.ERROR):
            metrics.export()

        assert len(received) == 1
        assert "sink down" in caplog.text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
