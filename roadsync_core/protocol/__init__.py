"""Protocol module - Serialization formats."""

from roadsync_core.protocol.serializer import (
    Serializer,
    JSONSerializer,
    MsgPackSerializer,
    SerializerRegistry,
    canonical_json,
    get_serializer,
)

__all__ = [
    "Serializer",
    "JSONSerializer",
    "MsgPackSerializer",
    "SerializerRegistry",
    "canonical_json",
    "get_serializer",
]
