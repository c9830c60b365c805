"""Data module - Records, queries and transforms."""

from roadsync_core.data.records import (
    Record,
    RecordIdentity,
    UNLOADED,
)
from roadsync_core.data.query import (
    FindRecord,
    FindRecords,
    FindRelatedRecord,
    FindRelatedRecords,
    Hints,
    Query,
    QueryExpression,
    RequestOptions,
)
from roadsync_core.data.transform import (
    AddRecord,
    Operation,
    RemoveRecord,
    ReplaceRelatedRecord,
    ReplaceRelatedRecords,
    Transform,
    UpdateRecord,
)

__all__ = [
    "Record",
    "RecordIdentity",
    "UNLOADED",
    "FindRecord",
    "FindRecords",
    "FindRelatedRecord",
    "FindRelatedRecords",
    "Hints",
    "Query",
    "QueryExpression",
    "RequestOptions",
    "AddRecord",
    "Operation",
    "RemoveRecord",
    "ReplaceRelatedRecord",
    "ReplaceRelatedRecords",
    "Transform",
    "UpdateRecord",
]
