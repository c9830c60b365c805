"""Strategy module - Sync orchestration between sources."""

from roadsync_core.strategy.strategy import Strategy
from roadsync_core.strategy.orchestrator import (
    Authority,
    Failure,
    StrategyConfig,
    StrategyPolicy,
    SyncOrchestrator,
)
from roadsync_core.strategy.variants import (
    OPTIMISTIC,
    PESSIMISTIC,
    REMOTE,
    optimistic_strategy,
    pessimistic_strategy,
    remote_strategy,
)
from roadsync_core.strategy.backup import BackupStrategy

__all__ = [
    "Strategy",
    "Authority",
    "Failure",
    "StrategyConfig",
    "StrategyPolicy",
    "SyncOrchestrator",
    "OPTIMISTIC",
    "PESSIMISTIC",
    "REMOTE",
    "optimistic_strategy",
    "pessimistic_strategy",
    "remote_strategy",
    "BackupStrategy",
]
