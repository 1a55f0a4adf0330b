import asyncio
from typing import Optional, Set

from app.features.lighthouse.models.job import Job
from app.features.lighthouse.services.runner import JobRunner
from app.platform.exceptions import DispatcherClosed
from app.platform.logger import get_logger

logger = get_logger("job_dispatcher")


class JobDispatcher:
    """
    Fire-and-forget hand-off from request handling to the job runner.

    Each submitted job becomes an independent asyncio task. A semaphore caps
    how many run at once; the rest wait in ``pending``. Task references are
    held until completion so the event loop cannot garbage-collect them.
    """

    def __init__(self, runner: JobRunner, max_concurrency: int = 2):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.runner = runner
        self.max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def accepting(self) -> bool:
        return not self._closed

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def submit(self, job: Job) -> asyncio.Task:
        if self._closed:
            raise DispatcherClosed(f"Refusing job {job.id}: dispatcher is shutting down")

        task = asyncio.create_task(self._run(job), name=f"lighthouse-{job.id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, job: Job) -> None:
        async with self._semaphore:
            try:
                await self.runner.execute(job)
            except asyncio.CancelledError:
                logger.warning(f"Job {job.id} abandoned during shutdown")
                raise
            except Exception:
                logger.exception(f"Job {job.id} crashed outside the runner's error handling")

    async def shutdown(self, grace_period: Optional[float] = None) -> None:
        """Stop accepting jobs, give in-flight ones ``grace_period`` seconds, cancel the rest."""
        self._closed = True
        pending = set(self._tasks)
        if not pending:
            return

        logger.info(f"Waiting up to {grace_period}s for {len(pending)} in-flight job(s)")
        _, still_running = await asyncio.wait(pending, timeout=grace_period)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning(f"Abandoned {len(still_running)} job(s) at shutdown")
