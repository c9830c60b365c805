"""RoadSync Coordinator - Source and Strategy Registry.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from roadsync_core.errors import ConfigurationError
from roadsync_core.source.source import Source
from roadsync_core.strategy.strategy import Strategy

logger = logging.getLogger(__name__)


class Coordinator:
    """Owns named sources and the strategies that connect them.

    Strategies are activated in registration order and deactivated
    in reverse.

    Example:
        coordinator = Coordinator(
            sources=[memory, remote, backup],
            strategies=[optimistic_strategy("memory", "remote", "backup")],
        )

        async with coordinator:
            await memory.update(AddRecord(record))
    """

    def __init__(
        self,
        sources: Optional[Iterable[Source]] = None,
        strategies: Optional[Iterable[Strategy]] = None,
    ):
        """Initialize coordinator.

        Args:
            sources: Sources to register
            strategies: Strategies to register
        """
        self._sources: Dict[str, Source] = {}
        self._strategies: Dict[str, Strategy] = {}
        self._active = False

        for source in sources or ():
            self.add_source(source)
        for strategy in strategies or ():
            self.add_strategy(strategy)

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def sources(self) -> List[Source]:
        return list(self._sources.values())

    @property
    def strategies(self) -> List[Strategy]:
        return list(self._strategies.values())

    def add_source(self, source: Source) -> None:
        """Register a source.

        Args:
            source: Source to add

        Raises:
            ConfigurationError: The name is taken
        """
        if source.name in self._sources:
            raise ConfigurationError(f"Source {source.name} is already registered")
        self._sources[source.name] = source
        logger.debug(f"Added source {source.name}")

    def get_source(self, name: str) -> Source:
        """Get a source by name.

        Raises:
            ConfigurationError: No such source
        """
        source = self._sources.get(name)
        if source is None:
            raise ConfigurationError(f"Unknown source: {name}")
        return source

    def remove_source(self, name: str) -> None:
        """Unregister a source.

        Raises:
            ConfigurationError: The coordinator is active
        """
        if self._active:
            raise ConfigurationError("Cannot remove a source while active")
        self._sources.pop(name, None)

    def add_strategy(self, strategy: Strategy) -> None:
        """Register a strategy.

        Args:
            strategy: Strategy to add

        Raises:
            ConfigurationError: The name is taken or the coordinator is active
        """
        if self._active:
            raise ConfigurationError("Cannot add a strategy while active")
        if strategy.name in self._strategies:
            raise ConfigurationError(f"Strategy {strategy.name} is already registered")
        self._strategies[strategy.name] = strategy
        logger.debug(f"Added strategy {strategy.name}")

    def get_strategy(self, name: str) -> Strategy:
        """Get a strategy by name.

        Raises:
            ConfigurationError: No such strategy
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            raise ConfigurationError(f"Unknown strategy: {name}")
        return strategy

    def remove_strategy(self, name: str) -> None:
        """Unregister a strategy.

        Raises:
            ConfigurationError: The coordinator is active
        """
        if self._active:
            raise ConfigurationError("Cannot remove a strategy while active")
        self._strategies.pop(name, None)

    async def activate(self) -> None:
        """Activate every strategy.

        A strategy failing to activate rolls back the ones before it.
        """
        if self._active:
            return

        activated: List[Strategy] = []
        try:
            for strategy in self._strategies.values():
                await strategy.activate(self)
                activated.append(strategy)
        except Exception:
            for strategy in reversed(activated):
                await strategy.deactivate()
            raise

        self._active = True
        logger.info(f"Coordinator activated {len(activated)} strategies")

    async def deactivate(self) -> None:
        """Deactivate every strategy in reverse order."""
        if not self._active:
            return

        for strategy in reversed(list(self._strategies.values())):
            await strategy.deactivate()
        self._active = False
        logger.info("Coordinator deactivated")

    def describe(self) -> Dict[str, Any]:
        """Get sources and the sources each strategy connects.

        Returns:
            Topology dictionary
        """
        return {
            "active": self._active,
            "sources": list(self._sources),
            "strategies": {
                name: [s for s in strategy.source_names if s is not None]
                for name, strategy in self._strategies.items()
            },
        }

    async def __aenter__(self) -> "Coordinator":
        await self.activate()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.deactivate()

    def __repr__(self) -> str:
        return (
            f"Coordinator(sources={len(self._sources)}, "
            f"strategies={len(self._strategies)}, active={self._active})"
        )


__all__ = ["Coordinator"]
