"""In-flight pipeline tracking."""

from __future__ import annotations

import asyncio
import logging

logger = logging.getLogger(__name__)


class InFlightJobs:
    """Maps job ids to the asyncio task running their pipeline.

    An entry lives only while its pipeline runs. All access happens on the
    event loop thread, so a plain dict is sufficient.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def add(self, job_id: str, task: asyncio.Task[None]) -> None:
        if job_id in self._tasks:
            raise ValueError(f"Job {job_id} already has a running pipeline")
        self._tasks[job_id] = task

    def get(self, job_id: str) -> asyncio.Task[None] | None:
        return self._tasks.get(job_id)

    def discard(self, job_id: str) -> None:
        self._tasks.pop(job_id, None)

    def ids(self) -> list[str]:
        return list(self._tasks)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    async def wait(self, job_id: str) -> None:
        """Suspend until the tracked pipeline for ``job_id`` finishes.

        Returns immediately when nothing is tracked. Never raises for the
        pipeline's own outcome, and cancelling the waiter leaves the
        pipeline running.
        """
        task = self._tasks.get(job_id)
        if task is None:
            return
        await asyncio.wait({task})

    async def wait_all(self, timeout: float | None = None) -> list[str]:
        """Wait for every tracked pipeline, up to ``timeout`` seconds.

        Returns:
            Ids of pipelines still running when the wait ended
        """
        tasks = set(self._tasks.values())
        if not tasks:
            return []
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            logger.warning("%d pipeline(s) still running after drain", len(pending))
        return [job_id for job_id, task in self._tasks.items() if task in pending]
