"""Tests for the retry policy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio

import pytest

from roadsync_core.policy.retry import RetryPolicy, RetryPolicyConfig

from conftest import FakeScheduler


class TestRetryPolicyConfig:
    """Tests for RetryPolicyConfig."""

    def test_defaults(self):
        """Test default values."""
        config = RetryPolicyConfig()

        assert config.enabled
        assert config.retries == 5
        assert config.delay == 0.1
        assert config.max_delay == 2.0
        assert config.factor == 2.0

    def test_from_dict_aliases(self):
        """Test camelCase option names."""
        config = RetryPolicyConfig.from_dict({"maxDelay": 30, "retries": 3})

        assert config.max_delay == 30
        assert config.retries == 3
        assert config.delay == 0.1

    def test_from_dict_disabled(self):
        """Test only an explicit False disables retries."""
        assert not RetryPolicyConfig.from_dict({"enabled": False}).enabled
        assert RetryPolicyConfig.from_dict({"enabled": None}).enabled
        assert RetryPolicyConfig.from_dict(None).enabled

    def test_validation(self):
        """Test invalid values are rejected."""
        with pytest.raises(ValueError):
            RetryPolicyConfig(retries=-1)
        with pytest.raises(ValueError):
            RetryPolicyConfig(delay=-0.1)
        with pytest.raises(ValueError):
            RetryPolicyConfig(factor=0)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_cap_is_strict(self):
        """Test N retries exhaust a policy allowing N."""
        scheduler = FakeScheduler()
        policy = RetryPolicy(RetryPolicyConfig(retries=3), scheduler)

        for _ in range(3):
            assert policy.can_retry
            policy.retry(lambda: None)
            scheduler.fire()

        assert policy.attempts == 3
        assert not policy.can_retry

    def test_reset_restores_and_cancels(self):
        """Test reset re-enables retries and the pending callback never runs."""
        scheduler = FakeScheduler()
        policy = RetryPolicy(RetryPolicyConfig(retries=1), scheduler)
        calls = []

        policy.retry(lambda: calls.append("fired"))
        assert not policy.can_retry
        assert policy.pending

        policy.reset()

        assert policy.can_retry
        assert not policy.pending
        assert scheduler.fire() == 0
        assert calls == []

    def test_reset_is_idempotent(self):
        """Test reset on a fresh policy."""
        policy = RetryPolicy(scheduler=FakeScheduler())

        policy.reset()
        policy.reset()

        assert policy.attempts == 0

    def test_backoff_sequence(self):
        """Test delays grow by the factor and stop at the cap."""
        scheduler = FakeScheduler()
        policy = RetryPolicy(RetryPolicyConfig(retries=10), scheduler)

        for _ in range(7):
            policy.retry(lambda: None)
            scheduler.fire()

        assert scheduler.delays == pytest.approx([0.1, 0.2, 0.4, 0.8, 1.6, 2.0, 2.0])

    def test_explicit_delay(self):
        """Test an explicit delay overrides the sequence but still counts."""
        scheduler = FakeScheduler()
        policy = RetryPolicy(scheduler=scheduler)

        policy.retry(lambda: None, policy.max_delay)

        assert scheduler.delays == [2.0]
        assert policy.attempts == 1

    def test_coalesces_while_pending(self):
        """Test only one retry is outstanding at a time."""
        scheduler = FakeScheduler()
        policy = RetryPolicy(scheduler=scheduler)
        calls = []

        assert policy.retry(lambda: calls.append(1))
        assert not policy.retry(lambda: calls.append(2))

        scheduler.fire()

        assert calls == [1]
        assert policy.attempts == 1

    def test_callback_may_retry_again(self):
        """Test pending is cleared before the callback runs."""
        scheduler = FakeScheduler()
        policy = RetryPolicy(scheduler=scheduler)
        rescheduled = []

        def callback():
            rescheduled.append(policy.retry(lambda: None))

        policy.retry(callback)
        scheduler.fire()

        assert rescheduled == [True]
        assert policy.attempts == 2

    def test_disabled(self):
        """Test a disabled policy never allows retries."""
        policy = RetryPolicy(RetryPolicyConfig(enabled=False), FakeScheduler())

        assert not policy.can_retry
        assert not policy.enabled

    @pytest.mark.asyncio
    async def test_default_scheduler_uses_loop(self):
        """Test the default scheduler runs on the event loop."""
        policy = RetryPolicy(RetryPolicyConfig(delay=0.01))
        fired = asyncio.Event()

        policy.retry(fired.set)
        await asyncio.wait_for(fired.wait(), timeout=1.0)

        assert not policy.pending


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
