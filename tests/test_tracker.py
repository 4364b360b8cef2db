"""Tests for in-flight pipeline tracking."""

import asyncio

import pytest

from audioscribe.jobs.tracker import InFlightJobs


async def _sleep_then_fail(delay: float) -> None:
    await asyncio.sleep(delay)
    raise RuntimeError("pipeline blew up")


class TestInFlightJobs:
    @pytest.mark.asyncio
    async def test_add_get_discard(self) -> None:
        tracker = InFlightJobs()
        task = asyncio.create_task(asyncio.sleep(0))
        tracker.add("j1", task)
        assert "j1" in tracker
        assert tracker.get("j1") is task
        assert tracker.ids() == ["j1"]

        tracker.discard("j1")
        tracker.discard("j1")
        assert len(tracker) == 0
        await task

    @pytest.mark.asyncio
    async def test_duplicate_add_rejected(self) -> None:
        tracker = InFlightJobs()
        task = asyncio.create_task(asyncio.sleep(0))
        tracker.add("j1", task)
        with pytest.raises(ValueError):
            tracker.add("j1", task)
        await task

    @pytest.mark.asyncio
    async def test_wait_untracked_returns(self) -> None:
        await InFlightJobs().wait("nothing")

    @pytest.mark.asyncio
    async def test_wait_swallows_task_outcome(self) -> None:
        tracker = InFlightJobs()
        task = asyncio.create_task(_sleep_then_fail(0.01))
        tracker.add("j1", task)
        await tracker.wait("j1")
        assert task.done()
        assert isinstance(task.exception(), RuntimeError)

    @pytest.mark.asyncio
    async def test_wait_all_with_timeout(self) -> None:
        tracker = InFlightJobs()
        quick = asyncio.create_task(asyncio.sleep(0))
        slow = asyncio.create_task(asyncio.sleep(10))
        tracker.add("quick", quick)
        tracker.add("slow", slow)

        remaining = await tracker.wait_all(timeout=0.05)
        assert remaining == ["slow"]
        slow.cancel()
        with pytest.raises(asyncio.CancelledError):
            await slow

    @pytest.mark.asyncio
    async def test_wait_all_empty(self) -> None:
        assert await InFlightJobs().wait_all(timeout=0) == []
