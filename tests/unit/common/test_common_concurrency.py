"""
Bounded executor and detached task tests.
"""

import asyncio
import pytest
from sentinel.common.concurrency import TaskFailure, drain_detached, map_limit, pending_detached, spawn_detached
from sentinel.common.errors import BatchError


class TestMapLimit:
    """Order, concurrency bound and failure policy"""

    async def test_preserves_input_order(self):
        async def fn(item, index):
            # later items finish first
            await asyncio.sleep((5 - index) * 0.002)
            return item * 10

        assert await map_limit([1, 2, 3, 4, 5], 3, fn) == [10, 20, 30, 40, 50]

    @pytest.mark.parametrize("limit", [1, 2, 4])
    async def test_never_exceeds_limit(self, limit):
        in_flight = 0
        peak = 0

        async def fn(item, index):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.001)
            in_flight -= 1
            return item

        await map_limit(list(range(12)), limit, fn)
        assert peak == limit

    async def test_limit_one_is_sequential(self):
        events = []

        async def fn(item, index):
            events.append(("start", index))
            await asyncio.sleep(0)
            events.append(("end", index))
            return item

        await map_limit([0, 1, 2], 1, fn)
        assert events == [("start", 0), ("end", 0), ("start", 1), ("end", 1), ("start", 2), ("end", 2)]

    async def test_non_positive_limit_still_runs(self):
        async def fn(item, index):
            return item

        assert await map_limit([1, 2], 0, fn) == [1, 2]

    async def test_empty_input(self):
        async def fn(item, index):
            raise AssertionError("not called")

        assert await map_limit([], 3, fn) == []

    async def test_collects_all_failures(self):
        seen = []

        async def fn(item, index):
            seen.append(item)
            if item % 2:
                raise ValueError(f"odd {item}")
            return item

        with pytest.raises(BatchError) as excinfo:
            await map_limit([1, 2, 3, 4], 2, fn)

        assert sorted(seen) == [1, 2, 3, 4]
        assert [f.index for f in excinfo.value.failures] == [0, 2]
        assert str(excinfo.value) == "2 batch item(s) failed"

    async def test_return_exceptions(self):
        async def fn(item, index):
            if item == "bad":
                raise RuntimeError("nope")
            return item.upper()

        results = await map_limit(["a", "bad", "c"], 2, fn, return_exceptions=True)

        assert results[0] == "A" and results[2] == "C"
        assert isinstance(results[1], TaskFailure)
        assert results[1].index == 1
        assert isinstance(results[1].error, RuntimeError)


class TestDetached:
    """Fire-and-forget tasks"""

    async def test_runs_to_completion(self):
        done = asyncio.Event()

        async def work():
            done.set()

        spawn_detached(work(), name="ok")
        await drain_detached()
        assert done.is_set()
        assert pending_detached() == 0

    async def test_failure_is_consumed(self):
        async def work():
            raise RuntimeError("detached failure")

        task = spawn_detached(work(), name="fails")
        await drain_detached()
        assert task.done()
        assert isinstance(task.exception(), RuntimeError)
        assert pending_detached() == 0
