"""RoadSync Cache Policy - Query Freshness Tracking.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from roadsync_core.data.query import (
    FindRecord,
    FindRecords,
    FindRelatedRecord,
    FindRelatedRecords,
    Query,
    QueryExpression,
)
from roadsync_core.data.records import UNLOADED, Record, RecordIdentity
from roadsync_core.protocol.serializer import canonical_json

logger = logging.getLogger(__name__)


class RecordOracle(ABC):
    """Synchronous existence lookups against a local record cache."""

    @abstractmethod
    def get_record_sync(self, identity: RecordIdentity) -> Optional[Record]:
        """Get a record, or None if it is not held locally."""
        pass

    @abstractmethod
    def get_records_sync(self, identities: Iterable[RecordIdentity]) -> List[Record]:
        """Get every locally held record among the identities."""
        pass

    @abstractmethod
    def get_related_record_sync(self, identity: RecordIdentity, relationship: str) -> Any:
        """Get a to-one link, or UNLOADED if it is not materialized."""
        pass

    @abstractmethod
    def get_related_records_sync(self, identity: RecordIdentity, relationship: str) -> Any:
        """Get a to-many link, or UNLOADED if it is not materialized."""
        pass


@dataclass
class CachePolicyConfig:
    """Cache policy configuration.

    Attributes:
        enabled: Track freshness at all; disabled means never fresh
        expire_in: Seconds a loaded expression stays fresh, None for forever
    """

    enabled: bool = True
    expire_in: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CachePolicyConfig":
        """Create from an option mapping (``expire_in`` or ``expireIn``)."""
        data = data or {}
        return cls(
            enabled=data.get("enabled", True) is not False,
            expire_in=data.get("expire_in", data.get("expireIn")),
        )


def fingerprint(expression: QueryExpression) -> str:
    """Derive the cache key for a query expression.

    Args:
        expression: Query expression

    Returns:
        Deterministic fingerprint string
    """
    if isinstance(expression, FindRecord):
        return expression.record.serialize()
    if isinstance(expression, (FindRelatedRecord, FindRelatedRecords)):
        return f"{expression.record.serialize()}:{expression.relationship}"
    return canonical_json(expression.to_dict())


class CachePolicy:
    """Tracks which query expressions have been satisfied remotely.

    An expression counts as satisfied when it was loaded within
    ``expire_in`` seconds, or when the bound record oracle can answer
    it from local data. A query is satisfied only when every one of
    its expressions is.

    Example:
        policy = CachePolicy(CachePolicyConfig(expire_in=60))
        policy.set_oracle(memory_source.cache)

        if not policy.has(query):
            await remote.query(query)
            policy.load(query)
    """

    def __init__(
        self,
        config: Optional[CachePolicyConfig] = None,
        oracle: Optional[RecordOracle] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize cache policy.

        Args:
            config: Cache policy configuration
            oracle: Local record cache used as a fallback
            clock: Time source in seconds
        """
        self.config = config or CachePolicyConfig()
        self._oracle = oracle
        self._clock = clock
        self._loaded: Dict[str, float] = {}

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def expire_in(self) -> Optional[float]:
        return self.config.expire_in

    def set_oracle(self, oracle: Optional[RecordOracle]) -> None:
        """Bind the local record cache."""
        self._oracle = oracle

    def load(self, query: Query) -> None:
        """Mark every expression of a query as freshly loaded.

        Args:
            query: Query satisfied by the remote source
        """
        if not self.config.enabled:
            return

        now = self._clock()
        for expression in query.expressions:
            self._loaded[fingerprint(expression)] = now

    def has(self, query: Query) -> bool:
        """Check whether a query can be answered without a remote call.

        Args:
            query: Query to check

        Returns:
            True if every expression is fresh or present locally
        """
        if not self.config.enabled:
            return False

        for expression in query.expressions:
            if not self._is_loaded(expression) and not self._in_cache(expression):
                return False
        return True

    def clear(self) -> None:
        """Drop all freshness records."""
        self._loaded.clear()

    def _is_loaded(self, expression: QueryExpression) -> bool:
        """Check the freshness record of one expression, evicting if expired."""
        key = fingerprint(expression)
        loaded_at = self._loaded.get(key)
        if loaded_at is None:
            return False

        expire_in = self.config.expire_in
        if expire_in is not None and self._clock() - loaded_at >= expire_in:
            del self._loaded[key]
            logger.debug(f"Freshness expired for {key}")
            return False

        return True

    def _in_cache(self, expression: QueryExpression) -> bool:
        """Ask the oracle whether local data already answers an expression."""
        oracle = self._oracle
        if oracle is None:
            return False

        if isinstance(expression, FindRecord):
            return oracle.get_record_sync(expression.record) is not None
        if isinstance(expression, FindRecords):
            # filter-only scans can never be proven complete locally
            if expression.records is None:
                return False
            found = oracle.get_records_sync(expression.records)
            return len(found) == len(expression.records)
        if isinstance(expression, FindRelatedRecord):
            link = oracle.get_related_record_sync(expression.record, expression.relationship)
            return link is not UNLOADED
        if isinstance(expression, FindRelatedRecords):
            link = oracle.get_related_records_sync(expression.record, expression.relationship)
            return link is not UNLOADED

        return False

    def __len__(self) -> int:
        return len(self._loaded)

    def __repr__(self) -> str:
        return f"CachePolicy(tracked={len(self._loaded)}, expire_in={self.config.expire_in})"


CacheFreshnessTracker = CachePolicy


__all__ = [
    "CachePolicy",
    "CachePolicyConfig",
    "CacheFreshnessTracker",
    "RecordOracle",
    "fingerprint",
]
