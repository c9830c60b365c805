"""RoadSync Source - Base Data Source.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Set, Union

from roadsync_core.data.query import Hints, Query, QueryExpression
from roadsync_core.data.transform import Operation, Transform
from roadsync_core.source.evented import Evented
from roadsync_core.source.queue import Request, RequestQueue

logger = logging.getLogger(__name__)


class Source(Evented):
    """Base class for data sources.

    Every query and update goes through the source's request queue.
    Processing a request runs the ``beforeQuery``/``beforeUpdate``
    listeners (their errors fail the request), then the source's own
    ``_query``/``_update``, then the ``query``/``update`` listeners.
    A failed request emits ``queryFail``/``updateFail`` and stays
    parked at the head of the queue until a listener retries or skips
    it. A source without fail listeners rejects failures immediately.

    Applied transforms are logged by id and announced through the
    ``transform`` event; a transform id is applied at most once.

    Subclasses override ``_query``, ``_update`` and ``_sync``.
    """

    def __init__(self, name: str):
        """Initialize source.

        Args:
            name: Source name, unique per coordinator
        """
        super().__init__()
        self.name = name
        self.request_queue = RequestQueue(name, self._process, self._request_failed)
        self._transform_log: List[str] = []
        self._applied: Set[str] = set()

    @property
    def transform_log(self) -> List[str]:
        """Ids of applied transforms, oldest first."""
        return list(self._transform_log)

    def has_applied(self, transform: Transform) -> bool:
        return transform.id in self._applied

    async def query(
        self,
        query: Union[Query, QueryExpression],
        options: Optional[Dict[str, Any]] = None,
        hints: Optional[Hints] = None,
    ) -> Any:
        """Run a query through the request queue.

        Args:
            query: Query or single expression
            options: Request options when passing an expression
            hints: Carrier a strategy may fill with a remote result

        Returns:
            Query result
        """
        if not isinstance(query, Query):
            query = Query.build(query, options)
        return await self.request_queue.push(Request("query", query, hints or Hints()))

    async def update(
        self,
        transform: Union[Transform, Operation],
        options: Optional[Dict[str, Any]] = None,
        hints: Optional[Hints] = None,
    ) -> Any:
        """Run an update through the request queue.

        Args:
            transform: Transform or single operation
            options: Request options when passing an operation
            hints: Carrier a strategy may fill with a remote result

        Returns:
            Update result
        """
        if not isinstance(transform, Transform):
            transform = Transform.build(transform, options)
        return await self.request_queue.push(Request("update", transform, hints or Hints()))

    async def sync(self, transform: Transform) -> None:
        """Apply a transform that already happened elsewhere.

        Args:
            transform: Transform to apply
        """
        if self.has_applied(transform):
            return
        await self._sync(transform)
        await self._transformed(transform)

    async def _process(self, request: Request) -> Any:
        if request.kind == "query":
            await self.fulfill_in_series("beforeQuery", request.data, request.hints)
            result = await self._query(request.data, request.hints)
            await self.settle_in_series("query", request.data, result)
            return result

        await self.fulfill_in_series("beforeUpdate", request.data, request.hints)
        result = await self._update(request.data, request.hints)
        await self._transformed(request.data)
        await self.settle_in_series("update", request.data, result)
        return result

    async def _request_failed(self, request: Request, error: Exception) -> bool:
        event = "queryFail" if request.kind == "query" else "updateFail"
        if not self.listeners(event):
            return False
        await self.settle_in_series(event, request.data, error)
        return True

    async def _transformed(self, transform: Transform) -> None:
        """Log a transform and notify ``transform`` listeners."""
        if transform.id in self._applied:
            return
        self._applied.add(transform.id)
        self._transform_log.append(transform.id)
        await self.settle_in_series("transform", transform)

    async def _query(self, query: Query, hints: Hints) -> Any:
        raise NotImplementedError(f"Source {self.name} does not support query")

    async def _update(self, transform: Transform, hints: Hints) -> Any:
        raise NotImplementedError(f"Source {self.name} does not support update")

    async def _sync(self, transform: Transform) -> None:
        raise NotImplementedError(f"Source {self.name} does not support sync")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, queued={len(self.request_queue)})"


__all__ = ["Source"]
