"""RoadSync Request Queue - Sequential Request Processing.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Deque, Optional

logger = logging.getLogger(__name__)


@dataclass
class Request:
    """A queued request.

    Attributes:
        kind: "query" or "update"
        data: The Query or Transform
        hints: Hints carrier shared by every attempt
    """

    kind: str
    data: Any
    hints: Any = None


@dataclass
class _Entry:
    request: Request
    future: asyncio.Future = field(repr=False)


class RequestQueue:
    """Processes requests one at a time, pausing on failure.

    When a request fails, the queue stops with that request at its
    head and the caller still waiting. The failure handler decides:
    ``retry()`` re-runs the head, ``skip(error)`` rejects it and moves
    on. If the handler reports the failure as unhandled, the queue
    skips immediately.

    Example:
        queue = RequestQueue("memory", processor, on_fail)
        result = await queue.push(Request("query", query))
    """

    def __init__(
        self,
        name: str,
        processor: Callable[[Request], Awaitable[Any]],
        on_fail: Optional[Callable[[Request, Exception], Awaitable[bool]]] = None,
    ):
        """Initialize queue.

        Args:
            name: Queue name for logging
            processor: Runs one request and returns its result
            on_fail: Returns True if it took charge of a failed request
        """
        self.name = name
        self._processor = processor
        self._on_fail = on_fail
        self._entries: Deque[_Entry] = deque()
        self._error: Optional[Exception] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def error(self) -> Optional[Exception]:
        """Error that paused the queue, if any."""
        return self._error

    @property
    def current(self) -> Optional[Request]:
        """Request at the head of the queue."""
        return self._entries[0].request if self._entries else None

    @property
    def processing(self) -> bool:
        return self._task is not None

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, request: Request) -> asyncio.Future:
        """Enqueue a request.

        Args:
            request: Request to process

        Returns:
            Future resolved with the request's result
        """
        future = asyncio.get_running_loop().create_future()
        self._entries.append(_Entry(request, future))
        self._ensure_processing()
        return future

    def retry(self) -> None:
        """Re-run the failed head request; no-op unless paused."""
        if self._error is None:
            return
        logger.debug(f"Queue {self.name} retrying {self.current.kind if self.current else None}")
        self._error = None
        self._ensure_processing()

    def skip(self, error: Optional[Exception] = None) -> None:
        """Reject the failed head request and resume; no-op unless paused.

        Args:
            error: Error to reject the caller with, defaults to the failure
        """
        if self._error is None:
            return
        error = error or self._error
        self._error = None
        if self._entries:
            entry = self._entries.popleft()
            if not entry.future.done():
                entry.future.set_exception(error)
        self._ensure_processing()

    def clear(self, error: Exception) -> None:
        """Reject every queued request."""
        while self._entries:
            entry = self._entries.popleft()
            if not entry.future.done():
                entry.future.set_exception(error)
        self._error = None

    def _ensure_processing(self) -> None:
        if self._task is None and self._entries and self._error is None:
            self._task = asyncio.get_running_loop().create_task(self._process())

    async def _process(self) -> None:
        try:
            while self._entries and self._error is None:
                entry = self._entries[0]
                try:
                    result = await self._processor(entry.request)
                except Exception as e:
                    self._error = e
                    logger.warning(f"Queue {self.name} paused on {entry.request.kind}: {e}")
                    handled = False
                    if self._on_fail is not None:
                        handled = await self._on_fail(entry.request, e)
                    if not handled and self._error is e:
                        self._error = None
                        self._entries.popleft()
                        if not entry.future.done():
                            entry.future.set_exception(e)
                    continue

                self._entries.popleft()
                if not entry.future.done():
                    entry.future.set_result(result)
        finally:
            self._task = None


__all__ = ["RequestQueue", "Request"]
