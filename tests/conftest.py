"""Shared test doubles.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio
from typing import Any, Callable, List, Optional

import pytest

from roadsync_core.data.query import Hints, Query
from roadsync_core.data.records import Record, RecordIdentity
from roadsync_core.data.transform import Transform
from roadsync_core.source.memory import RecordCache
from roadsync_core.source.source import Source


class FakeHandle:
    """Timer handle recorded by FakeScheduler."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Scheduler that records delays and fires only when told to."""

    def __init__(self):
        self.handles: List[FakeHandle] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def delays(self) -> List[float]:
        return [handle.delay for handle in self.handles]

    @property
    def pending(self) -> List[FakeHandle]:
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def fire(self) -> int:
        """Run every pending callback; returns how many ran."""
        due = self.pending
        for handle in due:
            handle.fired = True
            handle.callback()
        return len(due)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRemoteSource(Source):
    """Remote double answering from its own records.

    Queued errors are raised by the next calls, and an optional gate
    holds every call until it is set. Query results are announced as
    transforms, the way a real API source reports fetched records.
    """

    def __init__(self, name: str = "remote", records: Optional[List[Record]] = None):
        super().__init__(name)
        self.store = RecordCache(records)
        self.errors: List[Exception] = []
        self.queries: List[Query] = []
        self.updates: List[Transform] = []
        self.gate: Optional[asyncio.Event] = None

    def fail_next(self, *errors: Exception) -> None:
        self.errors.extend(errors)

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.errors:
            raise self.errors.pop(0)

    async def _query(self, query: Query, hints: Hints) -> Any:
        self.queries.append(query)
        await self._wait()
        result = self.store.evaluate(query)

        found = result if isinstance(result, list) else [result]
        records = [r for r in found if isinstance(r, Record)]
        if records:
            await self._transformed(Transform.add_records(records))
        return result

    async def _update(self, transform: Transform, hints: Hints) -> Any:
        self.updates.append(transform)
        await self._wait()
        results = self.store.patch(transform)
        return results[0] if len(results) == 1 else results


def planet(id: str, **attributes: Any) -> Record:
    """Build a planet record."""
    return Record(type="planet", id=id, attributes=attributes)


def identity(id: str, type: str = "planet") -> RecordIdentity:
    return RecordIdentity(type, id)


async def settle(rounds: int = 50) -> None:
    """Let queued tasks and callbacks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
