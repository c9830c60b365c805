"""RoadSync Query - Query Expressions and Request Options.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple, Union

from roadsync_core.data.records import RecordIdentity


@dataclass
class RequestOptions:
    """Per-request options recognized by strategies.

    Attributes:
        reload: Force a remote round trip
        background_reload: Return local data and refresh remotely
        blocking: Wait for the remote step before resolving
        extra: Unrecognized options, passed through to predicates
    """

    reload: bool = False
    background_reload: bool = False
    blocking: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    _ALIASES: ClassVar[Dict[str, str]] = {
        "backgroundReload": "background_reload",
    }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RequestOptions":
        """Build options from a plain dictionary.

        Args:
            data: Option mapping, camelCase keys accepted

        Returns:
            RequestOptions instance
        """
        options = cls()
        for key, value in (data or {}).items():
            name = cls._ALIASES.get(key, key)
            if name in ("reload", "background_reload", "blocking"):
                setattr(options, name, bool(value))
            else:
                options.extra[key] = value
        return options

    def get(self, key: str, default: Any = None) -> Any:
        """Look up an option by name, falling back to extras."""
        name = self._ALIASES.get(key, key)
        if name in ("reload", "background_reload", "blocking"):
            return getattr(self, name)
        return self.extra.get(key, default)


@dataclass(frozen=True)
class QueryExpression:
    """Base class for query expressions."""

    op: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        """Structural form used for canonical serialization."""
        return {"op": self.op}


@dataclass(frozen=True)
class FindRecord(QueryExpression):
    """Find a single record by identity."""

    op: ClassVar[str] = "findRecord"

    record: RecordIdentity

    def to_dict(self) -> Dict[str, Any]:
        return {"op": self.op, "record": self.record.to_dict()}


@dataclass(frozen=True)
class FindRecords(QueryExpression):
    """Find many records, either by identities or by type and filter.

    Attributes:
        records: Explicit identities to fetch
        type: Record type to scan
        filter: Attribute equality filter applied to the scan
    """

    op: ClassVar[str] = "findRecords"

    records: Optional[Tuple[RecordIdentity, ...]] = None
    type: Optional[str] = None
    filter: Optional[Tuple[Tuple[str, Any], ...]] = None

    def __post_init__(self):
        if self.records is not None and not isinstance(self.records, tuple):
            object.__setattr__(self, "records", tuple(self.records))
        if isinstance(self.filter, dict):
            object.__setattr__(self, "filter", tuple(sorted(self.filter.items())))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"op": self.op}
        if self.records is not None:
            data["records"] = [r.to_dict() for r in self.records]
        if self.type is not None:
            data["type"] = self.type
        if self.filter is not None:
            data["filter"] = [[k, v] for k, v in self.filter]
        return data


@dataclass(frozen=True)
class FindRelatedRecord(QueryExpression):
    """Find the record on the other end of a to-one relationship."""

    op: ClassVar[str] = "findRelatedRecord"

    record: RecordIdentity
    relationship: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": self.op,
            "record": self.record.to_dict(),
            "relationship": self.relationship,
        }


@dataclass(frozen=True)
class FindRelatedRecords(QueryExpression):
    """Find the records on the other end of a to-many relationship."""

    op: ClassVar[str] = "findRelatedRecords"

    record: RecordIdentity
    relationship: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": self.op,
            "record": self.record.to_dict(),
            "relationship": self.relationship,
        }


@dataclass
class Query:
    """A read request.

    Attributes:
        expressions: Ordered, non-empty expressions
        options: Request options
        id: Unique request id
    """

    expressions: Tuple[QueryExpression, ...]
    options: RequestOptions = field(default_factory=RequestOptions)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if isinstance(self.expressions, QueryExpression):
            self.expressions = (self.expressions,)
        else:
            self.expressions = tuple(self.expressions)
        if not self.expressions:
            raise ValueError("A query requires at least one expression")
        if isinstance(self.options, dict):
            self.options = RequestOptions.from_dict(self.options)

    @classmethod
    def build(
        cls,
        expressions: Union[QueryExpression, Iterable[QueryExpression]],
        options: Union[RequestOptions, Dict[str, Any], None] = None,
    ) -> "Query":
        """Build a query from one or more expressions.

        Args:
            expressions: Expression or iterable of expressions
            options: RequestOptions or option mapping

        Returns:
            Query instance
        """
        if isinstance(options, RequestOptions):
            return cls(expressions=expressions, options=options)
        return cls(expressions=expressions, options=RequestOptions.from_dict(options))


@dataclass
class Hints:
    """Mutable carrier a strategy may fill with a richer remote result."""

    data: Any = None


__all__ = [
    "RequestOptions",
    "QueryExpression",
    "FindRecord",
    "FindRecords",
    "FindRelatedRecord",
    "FindRelatedRecords",
    "Query",
    "Hints",
]
