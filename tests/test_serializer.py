"""Tests for serializers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from roadsync_core.protocol.serializer import (
    JSONSerializer,
    MsgPackSerializer,
    SerializerRegistry,
    canonical_json,
    get_serializer,
)

from conftest import planet


class TestJSONSerializer:
    """Tests for JSONSerializer."""

    def test_canonical_order(self):
        """Test canonical output ignores insertion order."""
        a = canonical_json({"b": 1, "a": {"y": 2, "x": 1}})
        b = canonical_json({"a": {"x": 1, "y": 2}, "b": 1})

        assert a == b == '{"a":{"x":1,"y":2},"b":1}'

    def test_default_mode_readable(self):
        """Test the default mode keeps spacing."""
        assert JSONSerializer().dumps({"a": 1}) == '{"a": 1}'

    def test_record_snapshot(self):
        """Test record dictionaries survive serialization."""
        serializer = get_serializer("json")
        record = planet("earth", name="Earth")

        data = serializer.deserialize(serializer.serialize(record.to_dict()))

        assert data == record.to_dict()


class TestMsgPackSerializer:
    """Tests for MsgPackSerializer."""

    def test_binary_payload(self):
        """Test MessagePack output decodes to the same structure."""
        pytest.importorskip("msgpack")
        serializer = MsgPackSerializer()
        value = {"version": 1, "records": [planet("earth").to_dict()]}

        packed = serializer.serialize(value)

        assert isinstance(packed, bytes)
        assert serializer.deserialize(packed) == value


class TestRegistry:
    """Tests for SerializerRegistry."""

    def test_formats(self):
        """Test built-in formats are registered with JSON as default."""
        registry = SerializerRegistry()

        assert set(registry.list_formats()) == {"json", "msgpack"}
        assert registry.get_default().format_name == "json"
        assert get_serializer().format_name == "json"

    def test_unknown_format(self):
        """Test unknown formats raise KeyError."""
        with pytest.raises(KeyError):
            get_serializer("yaml")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
