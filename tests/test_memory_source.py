"""Tests for the memory source and file backup.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest

from roadsync_core.data.query import (
    FindRecord,
    FindRecords,
    FindRelatedRecord,
    FindRelatedRecords,
    Hints,
    Query,
)
from roadsync_core.data.records import UNLOADED, Record
from roadsync_core.data.transform import (
    AddRecord,
    RemoveRecord,
    ReplaceRelatedRecord,
    ReplaceRelatedRecords,
    Transform,
    UpdateRecord,
)
from roadsync_core.errors import RecordNotFoundError
from roadsync_core.source.file import FileBackupConfig, FileBackupSource
from roadsync_core.source.memory import MemorySource, RecordCache

from conftest import identity, planet


class TestRecordCache:
    """Tests for RecordCache."""

    def test_patch_is_atomic(self):
        """Test a failing operation leaves the cache untouched."""
        cache = RecordCache()
        transform = Transform.build([
            AddRecord(planet("earth")),
            RemoveRecord(identity("venus")),
        ])

        with pytest.raises(RecordNotFoundError):
            cache.patch(transform)
        assert cache.get_record_sync(identity("earth")) is None

    def test_update_merges(self):
        """Test UpdateRecord layers attributes over the stored record."""
        cache = RecordCache([planet("earth", name="Earth", size=1)])

        cache.patch(Transform.build(UpdateRecord(planet("earth", size=2))))

        record = cache.get_record_sync(identity("earth"))
        assert record.attributes == {"name": "Earth", "size": 2}

    def test_related_links(self):
        """Test replacing and reading relationship links."""
        cache = RecordCache([planet("earth"), Record("moon", "luna")])
        luna = identity("luna", type="moon")

        assert cache.get_related_records_sync(identity("earth"), "moons") is UNLOADED

        cache.patch(Transform.build([
            ReplaceRelatedRecords(identity("earth"), "moons", (luna,)),
            ReplaceRelatedRecord(identity("earth"), "star", None),
        ]))

        assert cache.get_related_records_sync(identity("earth"), "moons") == [luna]
        assert cache.get_related_record_sync(identity("earth"), "star") is None

    def test_evaluate(self):
        """Test each expression kind against local records."""
        earth = Record(
            "planet",
            "earth",
            attributes={"rings": False},
            relationships={"moons": [identity("luna", type="moon")]},
        )
        luna = Record("moon", "luna", relationships={"planet": identity("earth")})
        saturn = planet("saturn", rings=True)
        cache = RecordCache([earth, luna, saturn])

        assert cache.evaluate(Query.build(FindRecord(identity("earth")))) == earth
        assert cache.evaluate(Query.build(FindRecord(identity("venus")))) is None
        assert cache.evaluate(Query.build(FindRecords(type="planet", filter={"rings": True}))) == [saturn]
        assert cache.evaluate(Query.build(FindRelatedRecords(identity("earth"), "moons"))) == [luna]
        assert cache.evaluate(Query.build(FindRelatedRecord(luna.identity, "planet"))) == earth

    def test_evaluate_many_expressions(self):
        """Test multi-expression queries return one result each."""
        cache = RecordCache([planet("earth")])
        query = Query.build([FindRecord(identity("earth")), FindRecord(identity("mars"))])

        assert cache.evaluate(query) == [planet("earth"), None]


class TestMemorySource:
    """Tests for MemorySource."""

    @pytest.mark.asyncio
    async def test_update_and_query(self):
        """Test records written through update are queryable."""
        memory = MemorySource()

        result = await memory.update(AddRecord(planet("earth")))

        assert result == planet("earth")
        assert await memory.query(FindRecord(identity("earth"))) == planet("earth")

    @pytest.mark.asyncio
    async def test_unknown_record_update(self):
        """Test updating a missing record fails."""
        memory = MemorySource()

        with pytest.raises(RecordNotFoundError):
            await memory.update(UpdateRecord(planet("venus", name="Venus")))

    @pytest.mark.asyncio
    async def test_hints_win(self):
        """Test hints data is returned instead of the local result."""
        memory = MemorySource(records=[planet("earth")])

        result = await memory.query(FindRecord(identity("earth")), hints=Hints(data="remote"))

        assert result == "remote"

    @pytest.mark.asyncio
    async def test_sync_then_update_applies_once(self):
        """Test an update already synced is not applied twice."""
        memory = MemorySource(records=[planet("earth")])
        transform = Transform.build(RemoveRecord(identity("earth")))

        await memory.sync(transform)
        result = await memory.update(transform)

        assert result is None
        assert memory.transform_log == [transform.id]


class TestFileBackupSource:
    """Tests for FileBackupSource."""

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path):
        """Test records survive a restart."""
        path = str(tmp_path / "backup.json")
        backup = FileBackupSource(config=FileBackupConfig(path=path))

        await backup.sync(Transform.add_records([planet("earth"), planet("mars")]))
        await backup.update(RemoveRecord(identity("mars")))

        restored = FileBackupSource(config=FileBackupConfig(path=path))
        records = await restored.query(FindRecords())

        assert records == [planet("earth")]
        assert not (tmp_path / "backup.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_corrupt_snapshot(self, tmp_path):
        """Test an unreadable snapshot starts empty."""
        path = tmp_path / "backup.json"
        path.write_text("{not json")

        backup = FileBackupSource(config=FileBackupConfig(path=str(path)))

        assert await backup.query(FindRecords()) == []

    @pytest.mark.asyncio
    async def test_msgpack_format(self, tmp_path):
        """Test MessagePack snapshots."""
        pytest.importorskip("msgpack")
        path = str(tmp_path / "backup.msgpack")
        config = FileBackupConfig.from_dict({"path": path, "format": "msgpack"})

        backup = FileBackupSource(config=config)
        await backup.sync(Transform.add_records([planet("earth", name="Earth")]))

        restored = FileBackupSource(config=config)
        assert await restored.query(FindRecord(identity("earth"))) == planet("earth", name="Earth")

    def test_reset(self, tmp_path):
        """Test reset drops the snapshot."""
        path = tmp_path / "backup.json"
        path.write_text('{"version": 1, "records": []}')
        backup = FileBackupSource(config=FileBackupConfig(path=str(path)))

        backup.reset()

        assert not path.exists()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
