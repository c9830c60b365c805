"""RoadSync Transform - Record Operations and Update Requests.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Iterable, Optional, Tuple, Union

from roadsync_core.data.query import RequestOptions
from roadsync_core.data.records import Record, RecordIdentity


@dataclass(frozen=True)
class Operation:
    """Base class for record operations."""

    op: ClassVar[str] = ""


@dataclass(frozen=True)
class AddRecord(Operation):
    """Add (or replace) a record."""

    op: ClassVar[str] = "addRecord"

    record: Record


@dataclass(frozen=True)
class UpdateRecord(Operation):
    """Merge fields into an existing record."""

    op: ClassVar[str] = "updateRecord"

    record: Record


@dataclass(frozen=True)
class RemoveRecord(Operation):
    """Remove a record."""

    op: ClassVar[str] = "removeRecord"

    record: RecordIdentity


@dataclass(frozen=True)
class ReplaceRelatedRecord(Operation):
    """Replace a to-one relationship link."""

    op: ClassVar[str] = "replaceRelatedRecord"

    record: RecordIdentity
    relationship: str
    related_record: Optional[RecordIdentity] = None


@dataclass(frozen=True)
class ReplaceRelatedRecords(Operation):
    """Replace a to-many relationship link."""

    op: ClassVar[str] = "replaceRelatedRecords"

    record: RecordIdentity
    relationship: str
    related_records: Tuple[RecordIdentity, ...] = ()


@dataclass
class Transform:
    """A write request: ordered operations applied atomically.

    Attributes:
        operations: Ordered record operations
        options: Request options
        id: Unique request id
    """

    operations: Tuple[Operation, ...]
    options: RequestOptions = field(default_factory=RequestOptions)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        if isinstance(self.operations, Operation):
            self.operations = (self.operations,)
        else:
            self.operations = tuple(self.operations)
        if isinstance(self.options, dict):
            self.options = RequestOptions.from_dict(self.options)

    @classmethod
    def build(
        cls,
        operations: Union[Operation, Iterable[Operation]],
        options: Union[RequestOptions, Dict[str, Any], None] = None,
    ) -> "Transform":
        """Build a transform from one or more operations.

        Args:
            operations: Operation or iterable of operations
            options: RequestOptions or option mapping

        Returns:
            Transform instance
        """
        if isinstance(options, RequestOptions):
            return cls(operations=operations, options=options)
        return cls(operations=operations, options=RequestOptions.from_dict(options))

    @classmethod
    def add_records(cls, records: Iterable[Record]) -> "Transform":
        """Build a transform adding every given record."""
        return cls(operations=tuple(AddRecord(record) for record in records))


__all__ = [
    "Operation",
    "AddRecord",
    "UpdateRecord",
    "RemoveRecord",
    "ReplaceRelatedRecord",
    "ReplaceRelatedRecords",
    "Transform",
]
