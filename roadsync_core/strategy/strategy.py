"""RoadSync Strategy - Strategy Base Class.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional

from roadsync_core.errors import ConfigurationError
from roadsync_core.source.evented import Listener
from roadsync_core.source.source import Source

if TYPE_CHECKING:
    from roadsync_core.coordinator import Coordinator

logger = logging.getLogger(__name__)


class Strategy:
    """Base class for strategies wiring named sources together.

    Sources are referenced by name and resolved through the coordinator
    on activation. Listener registrations are collected and undone on
    deactivation.
    """

    def __init__(self, name: str, sources: List[Optional[str]]):
        """Initialize strategy.

        Args:
            name: Strategy name, unique per coordinator
            sources: Source names; None entries are optional slots
        """
        self.name = name
        self.source_names = list(sources)
        self._sources: List[Optional[Source]] = []
        self._listeners: List[Callable[[], None]] = []
        self._coordinator: Optional["Coordinator"] = None

    @property
    def coordinator(self) -> Optional["Coordinator"]:
        return self._coordinator

    @property
    def active(self) -> bool:
        return self._coordinator is not None

    async def activate(self, coordinator: "Coordinator") -> None:
        """Resolve sources and start listening.

        Args:
            coordinator: Owning coordinator

        Raises:
            ConfigurationError: A named source is unknown
        """
        if self._coordinator is not None:
            raise ConfigurationError(f"Strategy {self.name} is already active")

        self._sources = [
            coordinator.get_source(name) if name is not None else None
            for name in self.source_names
        ]
        self._coordinator = coordinator
        logger.info(f"Activated strategy {self.name}")

    async def deactivate(self) -> None:
        """Remove every registered listener."""
        for unsubscribe in self._listeners:
            unsubscribe()
        self._listeners = []
        self._sources = []
        self._coordinator = None
        logger.info(f"Deactivated strategy {self.name}")

    def _listen(self, source: Any, event: str, listener: Listener) -> None:
        self._listeners.append(source.on(event, listener))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, active={self.active})"


__all__ = ["Strategy"]
