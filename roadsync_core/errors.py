"""RoadSync Errors - Exception Hierarchy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Any, Optional


class RoadSyncError(Exception):
    """Base class for all RoadSync errors."""


class ConnectivityError(RoadSyncError):
    """The remote source could not be reached.

    Default trigger for retries and, for offline-aware strategies,
    the signal to switch into offline mode.
    """


class ApplicationError(RoadSyncError):
    """The remote source rejected the request (validation, conflict).

    Never retried by default.

    Attributes:
        description: Human readable detail
        data: Optional payload returned alongside the rejection
    """

    def __init__(self, description: str, data: Optional[Any] = None):
        super().__init__(description)
        self.description = description
        self.data = data


class RecordNotFoundError(ApplicationError):
    """A referenced record does not exist."""

    def __init__(self, identity: Any):
        super().__init__(f"Record not found: {identity}")
        self.identity = identity


class ConfigurationError(RoadSyncError):
    """A strategy or coordinator was wired incorrectly."""


def is_connectivity_error(error: BaseException) -> bool:
    """Check whether an error is connectivity-class.

    Args:
        error: Raised exception

    Returns:
        True for ConnectivityError and the builtin ConnectionError family
    """
    return isinstance(error, (ConnectivityError, ConnectionError))


__all__ = [
    "RoadSyncError",
    "ConnectivityError",
    "ApplicationError",
    "RecordNotFoundError",
    "ConfigurationError",
    "is_connectivity_error",
]
