"""RoadSync Predicates - Pluggable Reload and Retry Decisions.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Optional

from roadsync_core.data.query import Query, QueryExpression, RequestOptions
from roadsync_core.errors import is_connectivity_error

ExpressionPredicate = Callable[[QueryExpression, RequestOptions], bool]
RetryPredicate = Callable[[Any, BaseException], bool]


def never(*args: Any) -> bool:
    """Predicate that is always false."""
    return False


def retry_on_connectivity(request: Any, error: BaseException) -> bool:
    """Retry only when the remote source was unreachable."""
    return is_connectivity_error(error)


_OPS = {
    "findRecord": "record",
    "findRecords": "records",
    "findRelatedRecord": "related_record",
    "findRelatedRecords": "related_records",
}


@dataclass
class ReloadPredicates:
    """Per-request decision functions.

    Reload predicates receive ``(expression, options)``; retry
    predicates receive ``(request, error)``.

    Attributes:
        should_reload_record: Force reload of a FindRecord
        should_reload_records: Force reload of a FindRecords
        should_reload_related_record: Force reload of a FindRelatedRecord
        should_reload_related_records: Force reload of a FindRelatedRecords
        should_background_reload_record: Allow stale FindRecord answers
        should_background_reload_records: Allow stale FindRecords answers
        should_background_reload_related_record: Allow stale related answers
        should_background_reload_related_records: Allow stale related answers
        should_retry_query: Retry a failed query
        should_retry_update: Retry a failed update
    """

    should_reload_record: ExpressionPredicate = never
    should_reload_records: ExpressionPredicate = never
    should_reload_related_record: ExpressionPredicate = never
    should_reload_related_records: ExpressionPredicate = never
    should_background_reload_record: ExpressionPredicate = never
    should_background_reload_records: ExpressionPredicate = never
    should_background_reload_related_record: ExpressionPredicate = never
    should_background_reload_related_records: ExpressionPredicate = never
    should_retry_query: RetryPredicate = retry_on_connectivity
    should_retry_update: RetryPredicate = retry_on_connectivity

    @classmethod
    def from_options(
        cls,
        options: Optional[Dict[str, Any]] = None,
        **defaults: Any,
    ) -> "ReloadPredicates":
        """Build a predicate set, ignoring unset (None) entries.

        Args:
            options: Predicate overrides by field name
            **defaults: Variant defaults applied before the overrides

        Returns:
            ReloadPredicates instance
        """
        names = {f.name for f in fields(cls)}
        values = {k: v for k, v in defaults.items() if k in names}
        for key, value in (options or {}).items():
            if key not in names:
                raise TypeError(f"Unknown predicate: {key}")
            if value is not None:
                values[key] = value
        return cls(**values)

    def should_reload(self, query: Query) -> bool:
        """True if the caller or any expression predicate forces a reload."""
        if query.options.reload:
            return True

        for expression in query.expressions:
            predicate = self._lookup("should_reload", expression)
            if predicate is not None and predicate(expression, query.options):
                return True
        return False

    def should_background_reload(self, query: Query) -> bool:
        """True if stale data may be returned while refreshing remotely.

        The caller option wins; otherwise every expression must agree.
        """
        if query.options.background_reload:
            return True

        for expression in query.expressions:
            predicate = self._lookup("should_background_reload", expression)
            if predicate is None or not predicate(expression, query.options):
                return False
        return True

    def _lookup(self, prefix: str, expression: QueryExpression) -> Optional[ExpressionPredicate]:
        suffix = _OPS.get(expression.op)
        if suffix is None:
            return None
        return getattr(self, f"{prefix}_{suffix}")


__all__ = [
    "ReloadPredicates",
    "ExpressionPredicate",
    "RetryPredicate",
    "never",
    "retry_on_connectivity",
]
