"""Source module - Data sources, request queue and connectivity."""

from roadsync_core.source.evented import Evented
from roadsync_core.source.queue import Request, RequestQueue
from roadsync_core.source.source import Source
from roadsync_core.source.memory import MemorySource, RecordCache
from roadsync_core.source.file import FileBackupConfig, FileBackupSource
from roadsync_core.source.connectivity import (
    AlwaysOnline,
    ConnectivityProbe,
    ManualConnectivityProbe,
)

__all__ = [
    "Evented",
    "Request",
    "RequestQueue",
    "Source",
    "MemorySource",
    "RecordCache",
    "FileBackupConfig",
    "FileBackupSource",
    "AlwaysOnline",
    "ConnectivityProbe",
    "ManualConnectivityProbe",
]
