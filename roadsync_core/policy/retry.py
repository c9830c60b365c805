"""RoadSync Retry Policy - Exponential Backoff Sequencing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

# (delay_seconds, callback) -> handle exposing cancel()
Scheduler = Callable[[float, Callable[[], None]], Any]


def loop_scheduler(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    """Schedule a callback on the running event loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


@dataclass
class RetryPolicyConfig:
    """Retry policy configuration.

    Attributes:
        enabled: Whether retries are allowed at all
        retries: Maximum attempts before giving up
        delay: Base delay in seconds
        max_delay: Ceiling for the computed delay in seconds
        factor: Multiplier applied per attempt
    """

    enabled: bool = True
    retries: int = 5
    delay: float = 0.1
    max_delay: float = 2.0
    factor: float = 2.0

    def __post_init__(self):
        if self.retries < 0:
            raise ValueError("retries must be >= 0")
        if self.delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be >= 0")
        if self.factor <= 0:
            raise ValueError("factor must be > 0")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RetryPolicyConfig":
        """Create from an option mapping.

        Accepts both ``max_delay`` and ``maxDelay``.

        Args:
            data: Option mapping

        Returns:
            RetryPolicyConfig instance
        """
        data = data or {}
        defaults = cls()
        return cls(
            enabled=data.get("enabled", True) is not False,
            retries=data.get("retries", defaults.retries),
            delay=data.get("delay", defaults.delay),
            max_delay=data.get("max_delay", data.get("maxDelay", defaults.max_delay)),
            factor=data.get("factor", defaults.factor),
        )


class RetryPolicy:
    """Backoff state machine shared by every request of a strategy.

    At most one retry is scheduled at a time; a burst of failures
    collapses into a single backoff sequence. Attempts only grow until
    ``reset()`` is called, normally after a successful remote call.

    ``retry()`` does not enforce the attempt cap. Callers check
    ``can_retry`` first.

    Example:
        policy = RetryPolicy(RetryPolicyConfig(retries=3))
        if policy.can_retry:
            policy.retry(queue.retry)
        ...
        policy.reset()
    """

    def __init__(
        self,
        config: Optional[RetryPolicyConfig] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        """Initialize retry policy.

        Args:
            config: Retry configuration
            scheduler: Timer factory, defaults to the running loop
        """
        self.config = config or RetryPolicyConfig()
        self._scheduler = scheduler or loop_scheduler
        self._attempts = 0
        self._handle: Optional[Any] = None

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def max_delay(self) -> float:
        return self.config.max_delay

    @property
    def attempts(self) -> int:
        """Number of retries scheduled since the last reset."""
        return self._attempts

    @property
    def pending(self) -> bool:
        """Whether a retry is currently scheduled."""
        return self._handle is not None

    @property
    def can_retry(self) -> bool:
        """Whether another retry is allowed."""
        return self.config.enabled and self._attempts < self.config.retries

    @property
    def current_delay(self) -> float:
        """Delay the next computed retry would use."""
        delay = self.config.delay * (self.config.factor ** self._attempts)
        return min(delay, self.config.max_delay)

    def retry(self, callback: Callable[[], None], delay: Optional[float] = None) -> bool:
        """Schedule a retry.

        Args:
            callback: Invoked once when the delay elapses
            delay: Explicit delay overriding the backoff sequence

        Returns:
            True if scheduled, False if a retry was already pending
        """
        if self._handle is not None:
            logger.debug("Retry already pending, coalescing")
            return False

        wait = delay if delay is not None else self.current_delay
        self._attempts += 1
        self._handle = self._scheduler(wait, lambda: self._fire(callback))
        logger.debug(f"Retry {self._attempts} scheduled in {wait:.3f}s")
        return True

    def reset(self) -> None:
        """Cancel any pending retry and zero the attempt counter."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._attempts = 0

    def _fire(self, callback: Callable[[], None]) -> None:
        """Run a scheduled callback."""
        self._handle = None
        callback()

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(attempts={self._attempts}/{self.config.retries}, "
            f"pending={self.pending})"
        )


__all__ = ["RetryPolicy", "RetryPolicyConfig", "Scheduler", "loop_scheduler"]
