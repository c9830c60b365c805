"""RoadSync Serializer - Canonical and Binary Serialization.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Abstract serializer for record payloads.

    Implementations handle different serialization formats.
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Serialize value to bytes.

        Args:
            value: Value to serialize

        Returns:
            Serialized bytes
        """
        pass

    @abstractmethod
    def deserialize(self, data: bytes) -> Any:
        """Deserialize bytes to value.

        Args:
            data: Serialized bytes

        Returns:
            Deserialized value
        """
        pass


class JSONSerializer(Serializer):
    """JSON serializer.

    Human-readable and interoperable. In canonical mode keys are
    sorted and whitespace is fixed, so structurally equal values
    always produce identical bytes.
    """

    def __init__(self, canonical: bool = False):
        """Initialize JSON serializer.

        Args:
            canonical: Sort keys and use compact separators
        """
        self.canonical = canonical

    @property
    def format_name(self) -> str:
        return "json"

    def dumps(self, value: Any) -> str:
        """Serialize to a JSON string.

        Args:
            value: Value to serialize

        Returns:
            JSON text
        """
        if self.canonical:
            return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
        return json.dumps(value, default=str)

    def serialize(self, value: Any) -> bytes:
        return self.dumps(value).encode("utf-8")

    def deserialize(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class MsgPackSerializer(Serializer):
    """MessagePack serializer.

    Compact binary format, faster than JSON.
    Requires msgpack package.
    """

    @property
    def format_name(self) -> str:
        return "msgpack"

    def serialize(self, value: Any) -> bytes:
        """Serialize to MessagePack bytes.

        Args:
            value: Value to serialize

        Returns:
            MessagePack bytes
        """
        try:
            import msgpack
            return msgpack.packb(value, use_bin_type=True)
        except ImportError:
            raise ImportError("msgpack package not installed. Run: pip install msgpack")

    def deserialize(self, data: bytes) -> Any:
        """Deserialize from MessagePack bytes.

        Args:
            data: MessagePack bytes

        Returns:
            Deserialized value
        """
        try:
            import msgpack
            return msgpack.unpackb(data, raw=False)
        except ImportError:
            raise ImportError("msgpack package not installed. Run: pip install msgpack")


class SerializerRegistry:
    """Registry of serializers."""

    def __init__(self):
        self._serializers: Dict[str, Serializer] = {}
        self._default: str = "json"

        self.register(JSONSerializer())
        self.register(MsgPackSerializer())

    def register(self, serializer: Serializer) -> None:
        """Register a serializer.

        Args:
            serializer: Serializer to register
        """
        self._serializers[serializer.format_name] = serializer

    def get(self, format_name: str) -> Serializer:
        """Get serializer by format.

        Args:
            format_name: Format name

        Returns:
            Serializer instance

        Raises:
            KeyError: If format not found
        """
        if format_name not in self._serializers:
            raise KeyError(f"Unknown serializer format: {format_name}")
        return self._serializers[format_name]

    def get_default(self) -> Serializer:
        """Get default serializer."""
        return self._serializers[self._default]

    def list_formats(self) -> List[str]:
        """List available formats."""
        return list(self._serializers.keys())


_registry = SerializerRegistry()
_canonical = JSONSerializer(canonical=True)


def get_serializer(format_name: Optional[str] = None) -> Serializer:
    """Get serializer by format.

    Args:
        format_name: Format name or None for default

    Returns:
        Serializer instance
    """
    if format_name is None:
        return _registry.get_default()
    return _registry.get(format_name)


def canonical_json(value: Any) -> str:
    """Serialize a value to canonical JSON text.

    Args:
        value: JSON-compatible value

    Returns:
        Deterministic JSON string
    """
    return _canonical.dumps(value)


__all__ = [
    "Serializer",
    "JSONSerializer",
    "MsgPackSerializer",
    "SerializerRegistry",
    "get_serializer",
    "canonical_json",
]
