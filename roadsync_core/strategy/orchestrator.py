"""RoadSync Orchestrator - Shared Sync Decision Backbone.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from roadsync_core.data.query import Hints, Query
from roadsync_core.data.transform import Transform
from roadsync_core.errors import ConfigurationError
from roadsync_core.metrics.collector import StrategyMetrics, Timer
from roadsync_core.policy.freshness import CachePolicy, CachePolicyConfig
from roadsync_core.policy.predicates import ReloadPredicates
from roadsync_core.policy.retry import RetryPolicy, RetryPolicyConfig, Scheduler
from roadsync_core.source.connectivity import AlwaysOnline, ConnectivityProbe
from roadsync_core.source.source import Source
from roadsync_core.strategy.strategy import Strategy

logger = logging.getLogger(__name__)


class Authority(Enum):
    """Which side's answer a strategy trusts."""

    SOURCE = auto()     # Local store answers, target catches up
    TARGET = auto()     # Target gates completion


@dataclass(frozen=True)
class StrategyPolicy:
    """Behavior switches distinguishing strategy variants.

    Attributes:
        authority: Which side gates completion of writes
        background_reload_allowed: Stale reads may refresh in the background
        offline_aware: Track connectivity and probe slowly while offline
        hints_enabled: Hand remote results to the caller through hints
    """

    authority: Authority = Authority.TARGET
    background_reload_allowed: bool = False
    offline_aware: bool = False
    hints_enabled: bool = False


@dataclass
class StrategyConfig:
    """Strategy configuration.

    Attributes:
        source: Name of the local source
        target: Name of the remote source
        backup: Name of the durable backup source, if any
        name: Strategy name, derived from the source names by default
        pass_hints: Fill caller hints with remote results
        retry_policy: Retry policy configuration
        cache_policy: Cache policy configuration
        catch: Handler for background failures, ``(request, error)``
    """

    source: str = ""
    target: str = ""
    backup: Optional[str] = None
    name: Optional[str] = None
    pass_hints: bool = True
    retry_policy: RetryPolicyConfig = field(default_factory=RetryPolicyConfig)
    cache_policy: CachePolicyConfig = field(default_factory=CachePolicyConfig)
    catch: Optional[Callable[[Any, BaseException], Any]] = None

    _ALIASES = {
        "passHints": "pass_hints",
        "retryPolicy": "retry_policy",
        "cachePolicy": "cache_policy",
    }

    def __post_init__(self):
        if not self.source:
            raise ConfigurationError("A source must be specified")
        if not self.target:
            raise ConfigurationError("A target must be specified")
        if self.name is None:
            chain = [self.source, self.target] + ([self.backup] if self.backup else [])
            self.name = " -> ".join(chain)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StrategyConfig":
        """Create from an option mapping.

        Args:
            data: Options, camelCase names accepted

        Returns:
            StrategyConfig instance

        Raises:
            ConfigurationError: An option is not recognized
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = cls._ALIASES.get(key, key)
            if name not in ("source", "target", "backup", "name", "pass_hints",
                            "retry_policy", "cache_policy", "catch"):
                raise ConfigurationError(f"Unknown strategy option: {key}")
            values[name] = value

        retry = values.get("retry_policy")
        if retry is None or isinstance(retry, dict):
            values["retry_policy"] = RetryPolicyConfig.from_dict(retry)
        cache = values.get("cache_policy")
        if cache is None or isinstance(cache, dict):
            values["cache_policy"] = CachePolicyConfig.from_dict(cache)
        if values.get("pass_hints") is None:
            values.pop("pass_hints", None)

        return cls(**values)


@dataclass
class Failure:
    """A failed remote step.

    Attributes:
        kind: "query" or "update"
        request: The Query or Transform
        error: Raised exception
        background: Failed outside any caller's await
    """

    kind: str
    request: Any
    error: Exception
    background: bool = False


FailureHook = Callable[["SyncOrchestrator", Failure], None]
RestoreHook = Callable[["SyncOrchestrator"], Awaitable[None]]


class SyncOrchestrator(Strategy):
    """Coordinates a local source, a remote target and an optional backup.

    The read and write decisions are shared by every variant; a
    ``StrategyPolicy`` switches behavior and the failure hook decides
    what happens once retrying is off the table.

    Read path:
    - reload when asked to, or when any reload predicate says so
    - otherwise touch the target only for stale queries
    - callers wait for the target unless a background reload is allowed
    - offline-aware strategies never touch the target while offline

    Write path:
    - forwarded to the target, waiting when the target is the
      authority or the caller asked for ``blocking``

    Failures are retried through one shared backoff sequence; a retry
    replays everything pending, not only the request that scheduled it.

    Example:
        strategy = pessimistic_strategy("memory", "remote")
        coordinator = Coordinator(sources=[memory, remote], strategies=[strategy])
        await coordinator.activate()
        record = await memory.query(FindRecord(identity))
    """

    def __init__(
        self,
        config: StrategyConfig,
        policy: StrategyPolicy,
        predicates: ReloadPredicates,
        on_failure: FailureHook,
        restore: Optional[RestoreHook] = None,
        connectivity: Optional[ConnectivityProbe] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], float]] = None,
        metrics: Optional[StrategyMetrics] = None,
    ):
        """Initialize orchestrator.

        Args:
            config: Strategy configuration
            policy: Variant behavior switches
            predicates: Reload and retry predicates
            on_failure: Variant failure branch
            restore: Activation hook run when a backup is configured
            connectivity: Online/offline signal, always online by default
            scheduler: Retry timer factory
            clock: Time source for freshness
            metrics: Metrics collector
        """
        super().__init__(config.name, [config.source, config.target, config.backup])
        self.config = config
        self.policy = policy
        self.predicates = predicates
        self.retry_policy = RetryPolicy(config.retry_policy, scheduler)
        self.cache_policy = CachePolicy(config.cache_policy, clock=clock or time.time)
        self.metrics = metrics or StrategyMetrics()

        self._on_failure = on_failure
        self._restore = restore
        self._connectivity = connectivity or AlwaysOnline()
        self._online = True
        self._running = False
        self._deferred: List[Tuple[str, Any]] = []
        self._tasks: Set[asyncio.Task] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def source(self) -> Source:
        return self._sources[0]

    @property
    def target(self) -> Source:
        return self._sources[1]

    @property
    def backup(self) -> Optional[Source]:
        return self._sources[2] if len(self._sources) > 2 else None

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def pending(self) -> int:
        """Background requests waiting for the next retry."""
        return len(self._deferred)

    async def activate(self, coordinator) -> None:
        """Bind sources, restore the backup and register listeners.

        Args:
            coordinator: Owning coordinator
        """
        await super().activate(coordinator)
        self._loop = asyncio.get_running_loop()
        self.cache_policy.set_oracle(getattr(self.source, "cache", None))
        if self.policy.offline_aware:
            self._online = self._connectivity.is_online()

        if self.backup is not None and self._restore is not None:
            try:
                await self._restore(self)
            except Exception:
                await super().deactivate()
                raise

        self._listen(self.target, "transform", self._on_target_transform)
        if self.backup is not None:
            self._listen(self.source, "transform", self._on_source_transform)
        self._listen(self.source, "beforeQuery", self._before_query)
        self._listen(self.source, "queryFail", self._on_query_fail)
        self._listen(self.source, "beforeUpdate", self._before_update)
        self._listen(self.source, "updateFail", self._on_update_fail)
        if self.policy.offline_aware:
            self._listeners.append(self._connectivity.on_change(self._connectivity_changed))

        self._running = True

    async def deactivate(self) -> None:
        """Stop listening; in-flight remote calls finish but are ignored.

        Requests parked waiting for a retry are rejected with their
        failure so neither queue stays paused.
        """
        self._running = False
        self.retry_policy.reset()
        self.cache_policy.clear()
        self._deferred = []
        if self._sources:
            self.source.request_queue.skip()
            self.target.request_queue.skip()
        await super().deactivate()

    async def drain(self) -> None:
        """Wait for every background remote call started so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # Listeners

    async def _on_target_transform(self, transform: Transform) -> None:
        await self.source.sync(transform)

    async def _on_source_transform(self, transform: Transform) -> None:
        await self.backup.sync(transform)

    async def _before_query(self, query: Query, hints: Optional[Hints]) -> None:
        if not self._running:
            return

        must_reload = self.predicates.should_reload(query)
        is_fresh = self.cache_policy.has(query)
        background = (
            self.policy.background_reload_allowed
            and self.predicates.should_background_reload(query)
        )

        touch = must_reload or not is_fresh or background
        if self.policy.offline_aware and not self._online:
            touch = False

        if not touch:
            logger.debug(f"{self.name}: answering {query.id} locally")
            self.metrics.record_local_hit()
            return

        if not must_reload and is_fresh:
            logger.debug(f"{self.name}: refreshing {query.id} in the background")
            self.metrics.record_background_reload()
            self._spawn("query", query)
            return

        self.metrics.record_remote_fetch()
        with Timer(self.metrics):
            result = await self.target.query(query)
        self._query_succeeded(query)
        self._apply_hints(hints, result)

    async def _before_update(self, transform: Transform, hints: Optional[Hints]) -> None:
        if not self._running:
            return

        self.metrics.record_push()
        blocking = self.policy.authority is Authority.TARGET or transform.options.blocking
        if not blocking:
            self._spawn("update", transform)
            return

        with Timer(self.metrics):
            result = await self.target.update(transform)
        self._update_succeeded()
        self._apply_hints(hints, result)

    def _on_query_fail(self, query: Query, error: Exception) -> None:
        self.handle_failure(Failure("query", query, error))

    def _on_update_fail(self, transform: Transform, error: Exception) -> None:
        self.handle_failure(Failure("update", transform, error))

    def _connectivity_changed(self, online: bool) -> None:
        if not self._running:
            return

        try:
            in_loop = asyncio.get_running_loop() is self._loop
        except RuntimeError:
            in_loop = False
        if not in_loop:
            # signals from other threads or sync code are handled on the loop
            self._loop.call_soon_threadsafe(self._connectivity_changed, online)
            return

        if not online:
            self.go_offline()
            return

        self._online = True
        logger.info(f"{self.name}: back online")
        self.retry_policy.reset()
        if self.retry_policy.can_retry:
            self._replay_pending()

    # Outcomes

    def _query_succeeded(self, query: Query) -> None:
        if not self._running:
            return
        self.cache_policy.load(query)
        self._remote_succeeded()

    def _update_succeeded(self) -> None:
        if not self._running:
            return
        self._remote_succeeded()

    def _remote_succeeded(self) -> None:
        """Reset the backoff and leave error-driven offline mode.

        Work still waiting on a cancelled retry is replayed at once.
        """
        waiting = self.retry_policy.pending
        self.retry_policy.reset()

        if not self._online and self._connectivity.is_online():
            self._online = True
            logger.info(f"{self.name}: target reachable again, back online")

        if waiting:
            self._replay_pending()

    def _apply_hints(self, hints: Optional[Hints], result: Any) -> None:
        if self.policy.hints_enabled and self.config.pass_hints and hints is not None:
            hints.data = result

    def should_retry(self, failure: Failure) -> bool:
        """Ask the retry predicate for the failure's kind."""
        if failure.kind == "query":
            return self.predicates.should_retry_query(failure.request, failure.error)
        return self.predicates.should_retry_update(failure.request, failure.error)

    def handle_failure(self, failure: Failure) -> None:
        """Retry a failed remote step or hand it to the variant.

        Args:
            failure: The failed step
        """
        if not self._running:
            return

        self.metrics.record_failure()
        should_retry = self.should_retry(failure)

        if (
            self.policy.offline_aware
            and not self._online
            and self.retry_policy.enabled
            and should_retry
        ):
            self.schedule_retry(failure, self.retry_policy.max_delay)
            return

        if should_retry and self.retry_policy.can_retry:
            self.schedule_retry(failure)
            return

        self._on_failure(self, failure)

    def schedule_retry(self, failure: Failure, delay: Optional[float] = None) -> None:
        """Park a failure until the next retry fires.

        Args:
            failure: The failed step
            delay: Explicit delay, the backoff sequence when None
        """
        if failure.background:
            self._deferred.append((failure.kind, failure.request))

        if self.retry_policy.retry(self._replay_pending, delay):
            self.metrics.record_retry()
            logger.warning(
                f"{self.name}: {failure.kind} failed ({failure.error}), "
                f"retry {self.retry_policy.attempts} scheduled"
            )

    def skip_queues(self, error: Exception) -> None:
        """Reject the parked requests of both queues with an error."""
        self.source.request_queue.skip(error)
        self.target.request_queue.skip(error)

    def report(self, failure: Failure) -> None:
        """Deliver a background failure to the catch handler or the loop."""
        catch = self.config.catch
        if catch is not None:
            result = catch(failure.request, failure.error)
            if inspect.isawaitable(result):
                self._track(asyncio.ensure_future(result))
            return

        logger.error(f"{self.name}: background {failure.kind} failed: {failure.error}")
        asyncio.get_running_loop().call_exception_handler({
            "message": f"Unhandled background {failure.kind} failure in {self.name}",
            "exception": failure.error,
        })

    def go_offline(self) -> None:
        """Switch to offline mode."""
        if not self._online:
            return
        self._online = False
        self.metrics.record_offline()
        logger.info(f"{self.name}: offline")

    # Background work

    def _replay_pending(self) -> None:
        if not self._running:
            return

        deferred, self._deferred = self._deferred, []
        for kind, request in deferred:
            self._spawn(kind, request)
        self.source.request_queue.retry()
        self.target.request_queue.retry()

    def _spawn(self, kind: str, request: Any) -> None:
        task = self._run_background(self.target, kind, request)
        self._track(asyncio.get_running_loop().create_task(task))

    def _track(self, task: "asyncio.Future") -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_background(self, target: Source, kind: str, request: Any) -> None:
        try:
            with Timer(self.metrics):
                if kind == "query":
                    await target.query(request)
                else:
                    await target.update(request)
        except Exception as e:
            self.handle_failure(Failure(kind, request, e, background=True))
            return

        if kind == "query":
            self._query_succeeded(request)
        else:
            self._update_succeeded()

    def __repr__(self) -> str:
        return (
            f"SyncOrchestrator(name={self.name!r}, online={self._online}, "
            f"retry={self.retry_policy!r})"
        )


__all__ = [
    "Authority",
    "StrategyPolicy",
    "StrategyConfig",
    "SyncOrchestrator",
    "Failure",
    "FailureHook",
    "RestoreHook",
]
