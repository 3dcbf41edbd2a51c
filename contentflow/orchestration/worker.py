"""Background consumer that runs queued generation jobs through the orchestrator."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Set

from contentflow.core.errors import NoSuitableAgentError
from contentflow.core.models import JobStatus, QueueJob
from contentflow.orchestration.orchestrator import AgentOrchestrator
from contentflow.services.queue import InMemoryJobQueue

logger = logging.getLogger(__name__)


class QueueWorker:
    """Dequeue jobs, route them through the orchestrator and store the outcome.

    Failed jobs are retried with exponential backoff until ``max_attempts``
    is reached, after which they are marked failed. Before a retry is
    requeued, the agent that failed the job is reset so selection can pick
    it again.
    """

    def __init__(
        self,
        orchestrator: AgentOrchestrator,
        queue: InMemoryJobQueue,
        *,
        retry_delay: float = 2.0,
        poll_interval: float = 0.5,
    ) -> None:
        self._orchestrator = orchestrator
        self._queue = queue
        self._retry_delay = retry_delay
        self._poll_interval = poll_interval
        self._runner: Optional[asyncio.Task[None]] = None
        self._stop_event = asyncio.Event()
        self._retries: Set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        """Start the worker's background loop."""
        if self._runner is not None:
            return
        self._stop_event.clear()
        self._runner = asyncio.create_task(self._run())
        logger.info("Queue worker started")

    async def stop(self) -> None:
        """Signal the worker to stop and wait for completion."""
        if self._runner is None:
            return
        self._stop_event.set()
        await self._runner
        self._runner = None
        for task in list(self._retries):
            task.cancel()
        await asyncio.gather(*self._retries, return_exceptions=True)
        logger.info("Queue worker stopped")

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            job = await self._queue.next_job(timeout=self._poll_interval)
            if job is None:
                continue
            await self.run_job(job)

    async def run_job(self, job: QueueJob) -> QueueJob:
        """Process one job and record its result, scheduling a retry on failure.

        The first failure message is kept on the job. When no agent accepts
        the request the job fails at once.
        """
        job.status = JobStatus.PROCESSING
        job.attempts += 1
        job.processed_at = datetime.now(timezone.utc)

        agent = self._orchestrator.select_best_agent(job.payload)
        if agent is None:
            self._mark_failed(job, NoSuitableAgentError().message)
            return job
        job.agent_id = agent.agent_id

        try:
            response = await self._orchestrator.dispatch(agent, job.payload)
        except Exception as exc:  # noqa: BLE001
            if job.attempts < job.max_attempts:
                job.error = job.error or str(exc)
                job.status = JobStatus.PENDING
                delay = self._retry_delay * 2 ** (job.attempts - 1)
                logger.warning(
                    "Job %s failed on attempt %d/%d, retrying in %.1fs: %s",
                    job.id,
                    job.attempts,
                    job.max_attempts,
                    delay,
                    exc,
                )
                self._schedule_retry(job, delay)
            else:
                self._mark_failed(job, str(exc))
            return job

        job.status = JobStatus.COMPLETED
        job.result = response
        job.error = None
        job.completed_at = datetime.now(timezone.utc)
        logger.info("Job %s completed by %s", job.id, response.agent_used)
        return job

    def _mark_failed(self, job: QueueJob, error: str) -> None:
        job.status = JobStatus.FAILED
        job.error = job.error or error
        job.completed_at = datetime.now(timezone.utc)
        logger.error("Job %s failed after %d attempts: %s", job.id, job.attempts, error)

    def _schedule_retry(self, job: QueueJob, delay: float) -> None:
        async def requeue_later() -> None:
            await asyncio.sleep(delay)
            # The failed attempt left its agent in error; re-admit it for the retry.
            if job.agent_id is not None and self._orchestrator.reset_agent(job.agent_id):
                logger.info("Agent %s re-admitted for retry of job %s", job.agent_id, job.id)
            await self._queue.requeue(job)

        task = asyncio.create_task(requeue_later())
        self._retries.add(task)
        task.add_done_callback(self._retries.discard)
