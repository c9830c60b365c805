"""RoadSync Connectivity - Online/Offline Signals.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, List

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[bool], None]


class ConnectivityProbe(ABC):
    """Reports whether the remote side is believed reachable."""

    @abstractmethod
    def is_online(self) -> bool:
        """Get the current connectivity state."""
        pass

    @abstractmethod
    def on_change(self, listener: ConnectivityListener) -> Callable[[], None]:
        """Subscribe to connectivity changes.

        Args:
            listener: Called with the new state

        Returns:
            Callable that removes the listener
        """
        pass


class AlwaysOnline(ConnectivityProbe):
    """Probe for environments without a connectivity signal."""

    def is_online(self) -> bool:
        return True

    def on_change(self, listener: ConnectivityListener) -> Callable[[], None]:
        return lambda: None


class ManualConnectivityProbe(ConnectivityProbe):
    """Probe driven by explicit ``set_online`` calls.

    Example:
        probe = ManualConnectivityProbe()
        strategy = optimistic_strategy(..., connectivity=probe)
        probe.set_online(False)
    """

    def __init__(self, online: bool = True):
        self._online = online
        self._listeners: List[ConnectivityListener] = []

    def is_online(self) -> bool:
        return self._online

    def on_change(self, listener: ConnectivityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_online(self, online: bool) -> None:
        """Set the state and notify listeners.

        Repeated signals are delivered too, so a host can announce
        that the network is back after a strategy went offline on its
        own because of a connectivity error.
        """
        if online != self._online:
            logger.info(f"Connectivity changed: {'online' if online else 'offline'}")
        self._online = online
        for listener in list(self._listeners):
            listener(online)


__all__ = [
    "ConnectivityProbe",
    "ConnectivityListener",
    "AlwaysOnline",
    "ManualConnectivityProbe",
]
