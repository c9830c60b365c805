"""RoadSync File Backup - Durable Record Snapshot Source.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from roadsync_core.data.query import Hints, Query
from roadsync_core.data.records import Record
from roadsync_core.data.transform import Transform
from roadsync_core.protocol.serializer import Serializer, get_serializer
from roadsync_core.source.memory import RecordCache
from roadsync_core.source.source import Source

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class FileBackupConfig:
    """File backup configuration.

    Attributes:
        path: Snapshot file path
        format: Serializer format, "json" or "msgpack"
    """

    path: str = "roadsync-backup.json"
    format: str = "json"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FileBackupConfig":
        data = data or {}
        defaults = cls()
        return cls(
            path=data.get("path", defaults.path),
            format=data.get("format", defaults.format),
        )


class FileBackupSource(Source):
    """Source persisting every record to a single snapshot file.

    Used as the backup of a strategy: each transform applied to it is
    written through to disk, and on activation its records are
    restored into the local source.

    Features:
    - Atomic writes (temp file then rename)
    - JSON or MessagePack snapshots
    - Unreadable snapshots are logged and treated as empty

    Example:
        backup = FileBackupSource("backup", FileBackupConfig(path="/var/lib/app/records.json"))
        records = await backup.query(FindRecords())
    """

    def __init__(self, name: str = "backup", config: Optional[FileBackupConfig] = None):
        """Initialize file backup.

        Args:
            name: Source name
            config: Backup configuration
        """
        super().__init__(name)
        self.config = config or FileBackupConfig()
        self.path = Path(self.config.path)
        self._serializer: Serializer = get_serializer(self.config.format)
        self.cache = RecordCache(self._load())

    def _load(self) -> list:
        """Read the snapshot file."""
        if not self.path.exists():
            return []

        try:
            with open(self.path, "rb") as f:
                data = self._serializer.deserialize(f.read())
            return [Record.from_dict(item) for item in data.get("records", [])]
        except Exception as e:
            logger.error(f"Error reading backup {self.path}: {e}")
            return []

    def _persist(self) -> None:
        """Write the snapshot atomically."""
        payload = {
            "version": SNAPSHOT_VERSION,
            "records": [record.to_dict() for record in self.cache.records()],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")

        try:
            with open(temp_path, "wb") as f:
                f.write(self._serializer.serialize(payload))
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path)
        except OSError:
            if temp_path.exists():
                temp_path.unlink()
            raise

        logger.debug(f"Backup {self.name} wrote {len(self.cache)} records to {self.path}")

    async def _query(self, query: Query, hints: Hints) -> Any:
        return self.cache.evaluate(query)

    async def _update(self, transform: Transform, hints: Hints) -> Any:
        results = self.cache.patch(transform)
        self._persist()
        return results[0] if len(results) == 1 else results

    async def _sync(self, transform: Transform) -> None:
        self.cache.patch(transform)
        self._persist()

    def reset(self) -> None:
        """Drop every record and delete the snapshot file."""
        self.cache = RecordCache()
        if self.path.exists():
            self.path.unlink()

    def __repr__(self) -> str:
        return f"FileBackupSource(path={self.path}, records={len(self.cache)})"


__all__ = ["FileBackupSource", "FileBackupConfig"]
