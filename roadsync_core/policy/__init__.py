"""Policy module - Retry, freshness and reload decisions."""

from roadsync_core.policy.retry import (
    RetryPolicy,
    RetryPolicyConfig,
)
from roadsync_core.policy.freshness import (
    CacheFreshnessTracker,
    CachePolicy,
    CachePolicyConfig,
    RecordOracle,
    fingerprint,
)
from roadsync_core.policy.predicates import (
    ReloadPredicates,
    never,
    retry_on_connectivity,
)

__all__ = [
    "RetryPolicy",
    "RetryPolicyConfig",
    "CacheFreshnessTracker",
    "CachePolicy",
    "CachePolicyConfig",
    "RecordOracle",
    "fingerprint",
    "ReloadPredicates",
    "never",
    "retry_on_connectivity",
]
