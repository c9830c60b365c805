"""RoadSync Strategy Variants - Pessimistic, Optimistic and Remote.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from roadsync_core.data.query import FindRecords, Query
from roadsync_core.data.transform import Transform
from roadsync_core.errors import is_connectivity_error
from roadsync_core.policy.predicates import ReloadPredicates, never
from roadsync_core.strategy.orchestrator import (
    Authority,
    Failure,
    StrategyConfig,
    StrategyPolicy,
    SyncOrchestrator,
)

logger = logging.getLogger(__name__)

PESSIMISTIC = StrategyPolicy(
    authority=Authority.TARGET,
    background_reload_allowed=True,
    offline_aware=False,
    hints_enabled=True,
)

OPTIMISTIC = StrategyPolicy(
    authority=Authority.SOURCE,
    background_reload_allowed=False,
    offline_aware=True,
    hints_enabled=False,
)

REMOTE = StrategyPolicy(authority=Authority.TARGET)

_RUNTIME_OPTIONS = ("connectivity", "scheduler", "clock", "metrics")


def pessimistic_failure(orchestrator: SyncOrchestrator, failure: Failure) -> None:
    """Give up on a failure: the waiting caller receives the error."""
    if failure.background:
        orchestrator.report(failure)
        return

    logger.error(f"{orchestrator.name}: {failure.kind} failed: {failure.error}")
    orchestrator.skip_queues(failure.error)


def optimistic_failure(orchestrator: SyncOrchestrator, failure: Failure) -> None:
    """Go offline on connectivity errors and keep probing slowly.

    Blocking callers receive the error; background failures go to the
    catch handler, or to the event loop when there is none.
    """
    if is_connectivity_error(failure.error):
        orchestrator.go_offline()

    retry_policy = orchestrator.retry_policy
    if retry_policy.enabled and not orchestrator.is_online and orchestrator.should_retry(failure):
        orchestrator.schedule_retry(failure, retry_policy.max_delay)
        return

    if failure.background:
        orchestrator.report(failure)
        return

    logger.error(f"{orchestrator.name}: {failure.kind} failed: {failure.error}")
    orchestrator.skip_queues(failure.error)


async def restore_backup(orchestrator: SyncOrchestrator) -> None:
    """Load every backed-up record into the local source."""
    records = await orchestrator.backup.query(Query.build(FindRecords()))
    if records:
        await orchestrator.source.sync(Transform.add_records(records))
    logger.info(f"{orchestrator.name}: restored {len(records or [])} records from backup")


def _build(
    policy: StrategyPolicy,
    on_failure,
    predicate_defaults: Dict[str, Any],
    source: str,
    target: str,
    backup: Optional[str],
    options: Dict[str, Any],
) -> SyncOrchestrator:
    runtime = {key: options.pop(key) for key in _RUNTIME_OPTIONS if key in options}
    predicate_options = {key: options.pop(key) for key in list(options) if key.startswith("should_")}

    config = StrategyConfig.from_dict({"source": source, "target": target, "backup": backup, **options})
    predicates = ReloadPredicates.from_options(predicate_options, **predicate_defaults)

    return SyncOrchestrator(
        config,
        policy,
        predicates,
        on_failure,
        restore=restore_backup,
        **runtime,
    )


def pessimistic_strategy(
    source: str,
    target: str,
    backup: Optional[str] = None,
    **options: Any,
) -> SyncOrchestrator:
    """Create a strategy where the target gates completion.

    Stale or forced reads wait for the target; writes always do. Fresh
    reads may be refreshed in the background when a background reload
    is requested. Unrecoverable failures reach the caller.

    The ``should_background_reload_*`` predicates default to never, so
    fresh reads are answered locally unless the caller passes the
    ``background_reload`` option or installs those predicates.

    Args:
        source: Local source name
        target: Remote source name
        backup: Backup source name
        **options: ``StrategyConfig`` options, ``should_*`` predicates,
            and ``connectivity``/``scheduler``/``clock``/``metrics``

    Returns:
        SyncOrchestrator instance
    """
    return _build(PESSIMISTIC, pessimistic_failure, {}, source, target, backup, options)


def optimistic_strategy(
    source: str,
    target: str,
    backup: Optional[str] = None,
    **options: Any,
) -> SyncOrchestrator:
    """Create a strategy where the local source is authoritative.

    Writes are accepted locally and pushed in the background unless
    the caller asks for ``blocking``. Stale reads fetch from the target
    only while online; offline they return local data.

    Args:
        source: Local source name
        target: Remote source name
        backup: Backup source name
        **options: ``StrategyConfig`` options, ``should_*`` predicates,
            and ``connectivity``/``scheduler``/``clock``/``metrics``

    Returns:
        SyncOrchestrator instance
    """
    defaults = {"should_retry_query": never}
    return _build(OPTIMISTIC, optimistic_failure, defaults, source, target, backup, options)


def remote_strategy(source: str, target: str, **options: Any) -> SyncOrchestrator:
    """Create a plain remote-first strategy.

    Like the pessimistic strategy without background reloads, hints or
    a backup.

    Args:
        source: Local source name
        target: Remote source name
        **options: ``StrategyConfig`` options, ``should_*`` predicates,
            and ``scheduler``/``clock``/``metrics``

    Returns:
        SyncOrchestrator instance
    """
    return _build(REMOTE, pessimistic_failure, {}, source, target, None, options)


__all__ = [
    "PESSIMISTIC",
    "OPTIMISTIC",
    "REMOTE",
    "pessimistic_strategy",
    "optimistic_strategy",
    "remote_strategy",
    "pessimistic_failure",
    "optimistic_failure",
    "restore_backup",
]
