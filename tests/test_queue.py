"""Tests for events, the request queue and the source base.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import asyncio

import pytest

from roadsync_core.data.query import FindRecord, Hints, Query
from roadsync_core.data.transform import AddRecord, Transform
from roadsync_core.errors import ConnectivityError
from roadsync_core.source.evented import Evented
from roadsync_core.source.queue import Request, RequestQueue

from conftest import FakeRemoteSource, identity, planet, settle


class TestEvented:
    """Tests for the Evented mixin."""

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        """Test the returned callable removes the listener."""
        emitter = Evented()
        calls = []
        off = emitter.on("ping", calls.append)

        await emitter.settle_in_series("ping", 1)
        off()
        await emitter.settle_in_series("ping", 2)

        assert calls == [1]
        assert emitter.listeners("ping") == []

    @pytest.mark.asyncio
    async def test_settle_ignores_errors(self):
        """Test settle keeps notifying after a listener fails."""
        emitter = Evented()
        calls = []

        def broken(value):
            raise RuntimeError("boom")

        emitter.on("ping", broken)
        emitter.on("ping", calls.append)

        await emitter.settle_in_series("ping", 1)

        assert calls == [1]

    @pytest.mark.asyncio
    async def test_fulfill_propagates(self):
        """Test fulfill stops at the first failing listener."""
        emitter = Evented()
        calls = []

        async def broken(value):
            raise RuntimeError("boom")

        emitter.on("ping", broken)
        emitter.on("ping", calls.append)

        with pytest.raises(RuntimeError):
            await emitter.fulfill_in_series("ping", 1)
        assert calls == []


class TestRequestQueue:
    """Tests for RequestQueue."""

    @pytest.mark.asyncio
    async def test_sequential(self):
        """Test requests run one at a time in order."""
        order = []

        async def processor(request):
            order.append(("start", request.data))
            await asyncio.sleep(0)
            order.append(("end", request.data))
            return request.data * 2

        queue = RequestQueue("test", processor)
        results = await asyncio.gather(
            queue.push(Request("query", 1)),
            queue.push(Request("query", 2)),
        )

        assert results == [2, 4]
        assert order == [("start", 1), ("end", 1), ("start", 2), ("end", 2)]

    @pytest.mark.asyncio
    async def test_unhandled_failure_rejects(self):
        """Test a failure nobody handles reaches the caller."""
        async def processor(request):
            raise ValueError("bad")

        queue = RequestQueue("test", processor)

        with pytest.raises(ValueError):
            await queue.push(Request("query", 1))
        assert queue.error is None

    @pytest.mark.asyncio
    async def test_parked_failure_retry(self):
        """Test a handled failure parks the request until retry."""
        attempts = []

        async def processor(request):
            attempts.append(request.data)
            if len(attempts) == 1:
                raise ConnectivityError("down")
            return "ok"

        async def on_fail(request, error):
            return True

        queue = RequestQueue("test", processor, on_fail)
        future = queue.push(Request("query", 1))
        await settle()

        assert not future.done()
        assert isinstance(queue.error, ConnectivityError)
        assert queue.current.data == 1

        queue.retry()

        assert await future == "ok"
        assert attempts == [1, 1]

    @pytest.mark.asyncio
    async def test_parked_failure_skip(self):
        """Test skip rejects the head and resumes the rest."""
        async def processor(request):
            if request.data == 1:
                raise ConnectivityError("down")
            return request.data

        async def on_fail(request, error):
            return True

        queue = RequestQueue("test", processor, on_fail)
        first = queue.push(Request("query", 1))
        second = queue.push(Request("query", 2))
        await settle()

        queue.skip(RuntimeError("gave up"))

        with pytest.raises(RuntimeError):
            await first
        assert await second == 2

    @pytest.mark.asyncio
    async def test_retry_skip_noop_when_healthy(self):
        """Test retry and skip do nothing unless paused."""
        async def processor(request):
            return request.data

        queue = RequestQueue("test", processor)
        queue.retry()
        queue.skip(RuntimeError("unused"))

        assert await queue.push(Request("query", 5)) == 5


class TestSource:
    """Tests for the Source request pipeline."""

    @pytest.mark.asyncio
    async def test_events_in_order(self):
        """Test before, transform and after events around an update."""
        source = FakeRemoteSource()
        events = []
        source.on("beforeUpdate", lambda transform, hints: events.append("beforeUpdate"))
        source.on("transform", lambda transform: events.append("transform"))
        source.on("update", lambda transform, result: events.append("update"))

        await source.update(AddRecord(planet("earth")))

        assert events == ["beforeUpdate", "transform", "update"]

    @pytest.mark.asyncio
    async def test_before_listener_failure_fails_request(self):
        """Test a failing beforeQuery listener fails the query."""
        source = FakeRemoteSource()

        async def refuse(query, hints):
            raise ConnectivityError("down")

        source.on("beforeQuery", refuse)

        with pytest.raises(ConnectivityError):
            await source.query(FindRecord(identity("earth")))
        assert source.queries == []

    @pytest.mark.asyncio
    async def test_fail_listener_parks_request(self):
        """Test a queryFail listener takes charge of the failure."""
        source = FakeRemoteSource(records=[planet("earth")])
        failures = []
        source.on("queryFail", lambda query, error: failures.append(error))
        source.fail_next(ConnectivityError("down"))

        task = asyncio.ensure_future(source.query(FindRecord(identity("earth"))))
        await settle()

        assert len(failures) == 1
        assert not task.done()

        source.request_queue.retry()

        assert await task == planet("earth")

    @pytest.mark.asyncio
    async def test_hints_shared_with_listeners(self):
        """Test listeners see the hints carrier passed by the caller."""
        source = FakeRemoteSource()
        seen = []
        source.on("beforeQuery", lambda query, hints: seen.append(hints))
        hints = Hints()

        await source.query(Query.build(FindRecord(identity("earth"))), hints=hints)

        assert seen == [hints]

    @pytest.mark.asyncio
    async def test_transform_applied_once(self):
        """Test a transform id is logged and announced once."""
        source = FakeRemoteSource()
        announced = []
        source.on("transform", announced.append)
        transform = Transform.add_records([planet("earth")])

        await source._transformed(transform)
        await source._transformed(transform)

        assert announced == [transform]
        assert source.transform_log == [transform.id]
        assert source.has_applied(transform)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
