"""RoadSync Memory Source - In-Memory Record Source.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from roadsync_core.data.query import (
    FindRecord,
    FindRecords,
    FindRelatedRecord,
    FindRelatedRecords,
    Hints,
    Query,
    QueryExpression,
)
from roadsync_core.data.records import UNLOADED, Record, RecordIdentity
from roadsync_core.data.transform import (
    AddRecord,
    Operation,
    RemoveRecord,
    ReplaceRelatedRecord,
    ReplaceRelatedRecords,
    Transform,
    UpdateRecord,
)
from roadsync_core.errors import RecordNotFoundError
from roadsync_core.policy.freshness import RecordOracle
from roadsync_core.source.source import Source

logger = logging.getLogger(__name__)


class RecordCache(RecordOracle):
    """Dictionary of records keyed by serialized identity.

    Doubles as the synchronous oracle consulted by the cache policy.

    Example:
        cache = RecordCache()
        cache.patch(Transform.add_records([record]))
        cache.get_record_sync(record.identity)
    """

    def __init__(self, records: Optional[Iterable[Record]] = None):
        """Initialize cache.

        Args:
            records: Initial records
        """
        self._records: Dict[str, Record] = {}
        for record in records or ():
            self._records[record.identity.serialize()] = record

    def get_record_sync(self, identity: RecordIdentity) -> Optional[Record]:
        return self._records.get(identity.serialize())

    def get_records_sync(self, identities: Iterable[RecordIdentity]) -> List[Record]:
        found = []
        for identity in identities:
            record = self._records.get(identity.serialize())
            if record is not None:
                found.append(record)
        return found

    def get_related_record_sync(self, identity: RecordIdentity, relationship: str) -> Any:
        record = self.get_record_sync(identity)
        if record is None or relationship not in record.relationships:
            return UNLOADED
        return record.relationships[relationship]

    def get_related_records_sync(self, identity: RecordIdentity, relationship: str) -> Any:
        record = self.get_record_sync(identity)
        if record is None or relationship not in record.relationships:
            return UNLOADED
        return list(record.relationships[relationship] or [])

    def records(self, type: Optional[str] = None) -> List[Record]:
        """Get all records, optionally of one type."""
        if type is None:
            return list(self._records.values())
        return [r for r in self._records.values() if r.type == type]

    def patch(self, transform: Transform) -> List[Optional[Record]]:
        """Apply every operation of a transform, all or nothing.

        Args:
            transform: Transform to apply

        Returns:
            Per-operation result: the affected record, or None on removal

        Raises:
            RecordNotFoundError: An operation references a missing record
        """
        staged = dict(self._records)
        results = [self._apply(staged, operation) for operation in transform.operations]
        self._records = staged
        return results

    def evaluate(self, query: Query) -> Any:
        """Answer a query from local records.

        Returns:
            The single expression's result, or a list of results
        """
        results = [self._evaluate(expression) for expression in query.expressions]
        return results[0] if len(results) == 1 else results

    def _apply(self, records: Dict[str, Record], operation: Operation) -> Optional[Record]:
        if isinstance(operation, AddRecord):
            records[operation.record.identity.serialize()] = operation.record
            return operation.record

        if isinstance(operation, RemoveRecord):
            key = operation.record.serialize()
            if key not in records:
                raise RecordNotFoundError(operation.record)
            del records[key]
            return None

        if isinstance(operation, UpdateRecord):
            key = operation.record.identity.serialize()
            current = records.get(key)
            if current is None:
                raise RecordNotFoundError(operation.record.identity)
            records[key] = current.merge(operation.record)
            return records[key]

        if isinstance(operation, ReplaceRelatedRecord):
            link: Any = operation.related_record
        elif isinstance(operation, ReplaceRelatedRecords):
            link = list(operation.related_records)
        else:
            raise TypeError(f"Unsupported operation: {operation!r}")

        key = operation.record.serialize()
        current = records.get(key)
        if current is None:
            raise RecordNotFoundError(operation.record)
        records[key] = Record(
            type=current.type,
            id=current.id,
            attributes=dict(current.attributes),
            relationships={**current.relationships, operation.relationship: link},
        )
        return records[key]

    def _evaluate(self, expression: QueryExpression) -> Any:
        if isinstance(expression, FindRecord):
            return self.get_record_sync(expression.record)

        if isinstance(expression, FindRecords):
            if expression.records is not None:
                return self.get_records_sync(expression.records)
            found = self.records(expression.type)
            for name, value in expression.filter or ():
                found = [r for r in found if r.attributes.get(name) == value]
            return found

        if isinstance(expression, FindRelatedRecord):
            link = self.get_related_record_sync(expression.record, expression.relationship)
            if link is UNLOADED or link is None:
                return None
            return self.get_record_sync(link)

        if isinstance(expression, FindRelatedRecords):
            link = self.get_related_records_sync(expression.record, expression.relationship)
            if link is UNLOADED:
                return []
            return self.get_records_sync(link)

        raise TypeError(f"Unsupported expression: {expression!r}")

    def __len__(self) -> int:
        return len(self._records)


class MemorySource(Source):
    """Source keeping records in process memory.

    Typically the local side of a strategy. Its ``cache`` is the
    oracle bound to the strategy's cache policy. A result placed in
    ``hints.data`` by a strategy is returned in preference to the
    locally evaluated one.

    Example:
        memory = MemorySource("memory")
        await memory.update(AddRecord(Record("planet", "earth")))
        planet = await memory.query(FindRecord(RecordIdentity("planet", "earth")))
    """

    def __init__(self, name: str = "memory", records: Optional[Iterable[Record]] = None):
        """Initialize memory source.

        Args:
            name: Source name
            records: Initial records
        """
        super().__init__(name)
        self.cache = RecordCache(records)

    async def _query(self, query: Query, hints: Hints) -> Any:
        if hints is not None and hints.data is not None:
            return hints.data
        return self.cache.evaluate(query)

    async def _update(self, transform: Transform, hints: Hints) -> Any:
        if self.has_applied(transform):
            results = [self._current(operation) for operation in transform.operations]
        else:
            results = self.cache.patch(transform)
            logger.debug(f"{self.name} applied {len(transform.operations)} operations")

        if hints is not None and hints.data is not None:
            return hints.data
        return results[0] if len(results) == 1 else results

    async def _sync(self, transform: Transform) -> None:
        self.cache.patch(transform)
        logger.debug(f"{self.name} synced transform {transform.id}")

    def _current(self, operation: Operation) -> Optional[Record]:
        if isinstance(operation, RemoveRecord):
            return None
        record = operation.record
        identity = record if isinstance(record, RecordIdentity) else record.identity
        return self.cache.get_record_sync(identity)


__all__ = ["MemorySource", "RecordCache"]
