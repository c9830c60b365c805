"""RoadSync - Local/Remote Data Sync Strategies.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A decision layer between a fast local record source and a slower,
failure-prone remote one:
- Pessimistic, optimistic and remote-first sync strategies
- Query freshness tracking with TTL and local existence checks
- Exponential backoff with a single shared retry sequence
- Online/offline awareness with slow probing while offline
- Durable file backups restored on activation
- Strategy metrics with Prometheus export

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                        RoadSync System                          │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │ Pessimistic │  │ Optimistic  │  │   Backup    │  STRATEGY   │
    │  │  strategy   │  │  strategy   │  │  strategy   │  LAYER      │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │              SyncOrchestrator                  │             │
    │  │   ┌───────┐  ┌───────────┐  ┌────────────┐   │   POLICY    │
    │  │   │ Retry │  │ Freshness │  │ Predicates │   │   LAYER     │
    │  │   └───────┘  └───────────┘  └────────────┘   │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │                  Sources                       │             │
    │  │   ┌────────┐  ┌────────┐  ┌────────┐         │   SOURCE    │
    │  │   │ Memory │  │ Remote │  │  File  │         │   LAYER     │
    │  │   └────────┘  └────────┘  └────────┘         │             │
    │  └──────────────────────┬────────────────────────┘             │
    │                         │                                       │
    │  ┌──────────────────────┴────────────────────────┐             │
    │  │                Coordinator                     │  REGISTRY  │
    │  └──────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from roadsync_core import (
        Coordinator, MemorySource, FileBackupSource, FileBackupConfig,
        FindRecord, RecordIdentity, optimistic_strategy,
    )

    memory = MemorySource("memory")
    backup = FileBackupSource("backup", FileBackupConfig(path="records.json"))
    remote = MyApiSource("remote")

    coordinator = Coordinator(
        sources=[memory, remote, backup],
        strategies=[
            optimistic_strategy(
                "memory", "remote", "backup",
                retry_policy={"retries": 3, "maxDelay": 30},
                cache_policy={"expireIn": 300},
            ),
        ],
    )

    async with coordinator:
        planet = await memory.query(FindRecord(RecordIdentity("planet", "earth")))
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from roadsync_core.errors import (
    RoadSyncError,
    ConnectivityError,
    ApplicationError,
    RecordNotFoundError,
    ConfigurationError,
)
from roadsync_core.data.records import Record, RecordIdentity, UNLOADED
from roadsync_core.data.query import (
    Query,
    RequestOptions,
    Hints,
    FindRecord,
    FindRecords,
    FindRelatedRecord,
    FindRelatedRecords,
)
from roadsync_core.data.transform import (
    Transform,
    AddRecord,
    UpdateRecord,
    RemoveRecord,
    ReplaceRelatedRecord,
    ReplaceRelatedRecords,
)
from roadsync_core.policy.retry import RetryPolicy, RetryPolicyConfig
from roadsync_core.policy.freshness import (
    CachePolicy,
    CachePolicyConfig,
    CacheFreshnessTracker,
    RecordOracle,
)
from roadsync_core.policy.predicates import ReloadPredicates
from roadsync_core.source.source import Source
from roadsync_core.source.queue import RequestQueue
from roadsync_core.source.memory import MemorySource, RecordCache
from roadsync_core.source.file import FileBackupSource, FileBackupConfig
from roadsync_core.source.connectivity import (
    ConnectivityProbe,
    AlwaysOnline,
    ManualConnectivityProbe,
)
from roadsync_core.strategy.strategy import Strategy
from roadsync_core.strategy.orchestrator import (
    Authority,
    StrategyConfig,
    StrategyPolicy,
    SyncOrchestrator,
)
from roadsync_core.strategy.variants import (
    pessimistic_strategy,
    optimistic_strategy,
    remote_strategy,
)
from roadsync_core.strategy.backup import BackupStrategy
from roadsync_core.coordinator import Coordinator
from roadsync_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    MsgPackSerializer,
)
from roadsync_core.metrics.collector import StrategyMetrics, SyncMetrics

__all__ = [
    # Errors
    "RoadSyncError",
    "ConnectivityError",
    "ApplicationError",
    "RecordNotFoundError",
    "ConfigurationError",
    # Data
    "Record",
    "RecordIdentity",
    "UNLOADED",
    "Query",
    "RequestOptions",
    "Hints",
    "FindRecord",
    "FindRecords",
    "FindRelatedRecord",
    "FindRelatedRecords",
    "Transform",
    "AddRecord",
    "UpdateRecord",
    "RemoveRecord",
    "ReplaceRelatedRecord",
    "ReplaceRelatedRecords",
    # Policy
    "RetryPolicy",
    "RetryPolicyConfig",
    "CachePolicy",
    "CachePolicyConfig",
    "CacheFreshnessTracker",
    "RecordOracle",
    "ReloadPredicates",
    # Sources
    "Source",
    "RequestQueue",
    "MemorySource",
    "RecordCache",
    "FileBackupSource",
    "FileBackupConfig",
    "ConnectivityProbe",
    "AlwaysOnline",
    "ManualConnectivityProbe",
    # Strategies
    "Strategy",
    "Authority",
    "StrategyConfig",
    "StrategyPolicy",
    "SyncOrchestrator",
    "pessimistic_strategy",
    "optimistic_strategy",
    "remote_strategy",
    "BackupStrategy",
    "Coordinator",
    # Protocol
    "Serializer",
    "JSONSerializer",
    "MsgPackSerializer",
    # Metrics
    "StrategyMetrics",
    "SyncMetrics",
]
