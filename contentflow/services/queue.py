"""Job queue used for asynchronous generation requests."""
from __future__ import annotations

import abc
import asyncio
import logging
from typing import Dict, Optional

from contentflow.core.errors import JobNotFoundError
from contentflow.core.models import JobStatus, QueueJob

logger = logging.getLogger(__name__)

FINISHED_STATUSES = (JobStatus.COMPLETED, JobStatus.FAILED)


class JobQueue(abc.ABC):
    """Fire-and-forget enqueue contract consumed by the orchestrator."""

    @abc.abstractmethod
    async def add_job(self, job: QueueJob) -> None:
        """Enqueue a job for later processing."""


class InMemoryJobQueue(JobQueue):
    """Process-local queue keeping a table of the jobs it has seen.

    Completed and failed jobs stay readable through :meth:`get_job` until more
    than ``retention`` of them have piled up; the oldest are then dropped
    when the next job is added. Pending and running jobs are never dropped.
    """

    def __init__(self, retention: int = 1000) -> None:
        if retention < 0:
            raise ValueError("retention must not be negative")
        self._retention = retention
        self._pending: asyncio.Queue[str] = asyncio.Queue()
        self._jobs: Dict[str, QueueJob] = {}

    async def add_job(self, job: QueueJob) -> None:
        self._prune_finished()
        self._jobs[job.id] = job
        await self._pending.put(job.id)
        logger.info("Job %s queued (type=%s, priority=%s)", job.id, job.type, job.priority)

    def _prune_finished(self) -> None:
        finished = [job_id for job_id, job in self._jobs.items() if job.status in FINISHED_STATUSES]
        excess = len(finished) - self._retention
        if excess <= 0:
            return
        for job_id in finished[:excess]:
            del self._jobs[job_id]
        logger.debug("Pruned %d finished jobs", excess)

    async def requeue(self, job: QueueJob) -> None:
        """Put a known job back on the pending queue for another attempt."""
        if job.id not in self._jobs:
            raise JobNotFoundError(job.id)
        await self._pending.put(job.id)

    async def next_job(self, timeout: Optional[float] = None) -> Optional[QueueJob]:
        """Return the next pending job, or ``None`` if none arrived within ``timeout``."""
        try:
            if timeout is None:
                job_id = await self._pending.get()
            else:
                job_id = await asyncio.wait_for(self._pending.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        self._pending.task_done()
        return self._jobs[job_id]

    def get_job(self, job_id: str) -> QueueJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def pending_count(self) -> int:
        return self._pending.qsize()

    async def join(self) -> None:
        """Wait until every enqueued job id has been taken off the queue."""
        await self._pending.join()
