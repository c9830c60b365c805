"""RoadSync Backup Strategy - Mirror a Source into a Backup.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Optional

from roadsync_core.data.query import FindRecords, Query
from roadsync_core.data.transform import Transform
from roadsync_core.errors import ConfigurationError
from roadsync_core.source.source import Source
from roadsync_core.strategy.strategy import Strategy

logger = logging.getLogger(__name__)


class BackupStrategy(Strategy):
    """Mirrors every transform of a source into a backup source.

    On activation the backup's records are restored into the source
    before mirroring starts.

    Example:
        strategy = BackupStrategy("memory", "backup")
        coordinator = Coordinator(sources=[memory, backup], strategies=[strategy])
        await coordinator.activate()
    """

    def __init__(self, source: str, backup: str, name: Optional[str] = None):
        """Initialize backup strategy.

        Args:
            source: Source name
            backup: Backup source name
            name: Strategy name
        """
        if not source or not backup:
            raise ConfigurationError("BackupStrategy requires a source and a backup")
        super().__init__(name or f"{source} -> {backup}", [source, backup])

    @property
    def source(self) -> Source:
        return self._sources[0]

    @property
    def backup(self) -> Source:
        return self._sources[1]

    async def activate(self, coordinator) -> None:
        await super().activate(coordinator)
        try:
            await self.restore_backup()
        except Exception:
            await super().deactivate()
            raise
        self._listen(self.source, "transform", self.backup.sync)

    async def restore_backup(self) -> int:
        """Load every backed-up record into the source.

        Returns:
            Number of records restored
        """
        records = await self.backup.query(Query.build(FindRecords()))
        if records:
            await self.source.sync(Transform.add_records(records))
        logger.info(f"{self.name}: restored {len(records)} records")
        return len(records)


__all__ = ["BackupStrategy"]
