"""RoadSync Evented - Listener Registration and Dispatch.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Evented:
    """Mixin giving an object named events with ordered listeners.

    Listeners may be plain callables or coroutine functions. Dispatch
    runs them one at a time in registration order, awaiting each
    result that is awaitable.

    Example:
        unsubscribe = source.on("transform", handle_transform)
        ...
        unsubscribe()
    """

    def __init__(self) -> None:
        self._event_listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """Register a listener.

        Args:
            event: Event name
            listener: Callable invoked with the event arguments

        Returns:
            Callable that removes the listener
        """
        self._event_listeners.setdefault(event, []).append(listener)

        def unsubscribe() -> None:
            self.off(event, listener)

        return unsubscribe

    def off(self, event: str, listener: Listener) -> None:
        """Remove a listener; unknown listeners are ignored."""
        listeners = self._event_listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listeners(self, event: str) -> List[Listener]:
        """Get a snapshot of the listeners of an event."""
        return list(self._event_listeners.get(event, ()))

    async def settle_in_series(self, event: str, *args: Any) -> None:
        """Notify listeners, logging and ignoring their errors."""
        for listener in self.listeners(event):
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Listener for {event} failed: {e}")

    async def fulfill_in_series(self, event: str, *args: Any) -> None:
        """Notify listeners; the first error propagates to the caller."""
        for listener in self.listeners(event):
            result = listener(*args)
            if inspect.isawaitable(result):
                await result


__all__ = ["Evented", "Listener"]
