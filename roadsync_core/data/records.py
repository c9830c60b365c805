"""RoadSync Records - Record Identity and Record Model.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


class _Unloaded:
    """Marker for a relationship link that is not materialized locally."""

    _instance: Optional["_Unloaded"] = None

    def __new__(cls) -> "_Unloaded":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNLOADED"


UNLOADED = _Unloaded()


@dataclass(frozen=True)
class RecordIdentity:
    """Identity of a record.

    Attributes:
        type: Record type
        id: Record id, unique per type
    """

    type: str
    id: str

    def serialize(self) -> str:
        """Canonical string form, ``type:id``."""
        return f"{self.type}:{self.id}"

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "id": self.id}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecordIdentity":
        return cls(type=data["type"], id=str(data["id"]))

    def __str__(self) -> str:
        return self.serialize()


RelationshipData = Union[None, RecordIdentity, List[RecordIdentity]]


@dataclass
class Record:
    """A record held by a source.

    Relationships map a name to a to-one identity (or None) or a
    to-many list of identities. A relationship key that is absent is
    not loaded, which is different from a key present with no data.

    Attributes:
        type: Record type
        id: Record id
        attributes: Attribute values
        relationships: Relationship links
    """

    type: str
    id: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    relationships: Dict[str, RelationshipData] = field(default_factory=dict)

    @property
    def identity(self) -> RecordIdentity:
        """Get the record's identity."""
        return RecordIdentity(self.type, self.id)

    def merge(self, other: "Record") -> "Record":
        """Return a copy with another record's fields layered on top.

        Args:
            other: Record carrying newer attributes/relationships

        Returns:
            Merged record
        """
        return Record(
            type=self.type,
            id=self.id,
            attributes={**self.attributes, **other.attributes},
            relationships={**self.relationships, **other.relationships},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        relationships: Dict[str, Any] = {}
        for name, data in self.relationships.items():
            if data is None:
                relationships[name] = None
            elif isinstance(data, RecordIdentity):
                relationships[name] = data.to_dict()
            else:
                relationships[name] = [identity.to_dict() for identity in data]

        return {
            "type": self.type,
            "id": self.id,
            "attributes": dict(self.attributes),
            "relationships": relationships,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        """Create from dictionary.

        Args:
            data: Dictionary produced by ``to_dict``

        Returns:
            Record instance
        """
        relationships: Dict[str, RelationshipData] = {}
        for name, link in data.get("relationships", {}).items():
            if link is None:
                relationships[name] = None
            elif isinstance(link, dict):
                relationships[name] = RecordIdentity.from_dict(link)
            else:
                relationships[name] = [RecordIdentity.from_dict(item) for item in link]

        return cls(
            type=data["type"],
            id=str(data["id"]),
            attributes=dict(data.get("attributes", {})),
            relationships=relationships,
        )


__all__ = ["RecordIdentity", "Record", "RelationshipData", "UNLOADED"]
