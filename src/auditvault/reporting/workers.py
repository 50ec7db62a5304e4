"""Bounded worker pool for asynchronous report generation.

Jobs are identified by their id alone; the handler reloads whatever state
it needs. ``submit`` waits for queue space, so a full queue pushes back on
callers instead of growing without bound.
"""

import asyncio
from collections.abc import Awaitable, Callable
from uuid import UUID

from auditvault.core.logging import LogContext, get_logger
from auditvault.observability.metrics import set_report_queue_depth

logger = get_logger(__name__)

JobHandler = Callable[[UUID], Awaitable[None]]


class WorkerPoolClosedError(RuntimeError):
    """Raised when submitting to a pool that has been stopped."""


class ReportWorkerPool:
    """Fixed set of asyncio worker tasks consuming a bounded job queue.

    Usage:
        pool = ReportWorkerPool(orchestrator.process_job, worker_count=4)
        await pool.start()
        await pool.submit(job.id)
        ...
        await pool.stop(drain=True)
    """

    def __init__(
        self,
        handler: JobHandler,
        worker_count: int = 4,
        queue_size: int = 100,
    ):
        if worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self._handler = handler
        self._worker_count = worker_count
        self._queue: asyncio.Queue[UUID] = asyncio.Queue(maxsize=queue_size)
        self._workers: list[asyncio.Task[None]] = []
        self._closed = False

    @property
    def is_running(self) -> bool:
        return bool(self._workers)

    @property
    def is_accepting(self) -> bool:
        """False once the pool has been stopped."""
        return not self._closed

    @property
    def queue_depth(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._workers:
            logger.warning("report_worker_pool_already_running")
            return

        self._closed = False
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"report_worker_{index}")
            for index in range(self._worker_count)
        ]
        logger.info("report_worker_pool_started", workers=self._worker_count)

    async def submit(self, job_id: UUID) -> None:
        """Queue a job, waiting for space if the queue is full.

        Raises:
            WorkerPoolClosedError: If the pool has been stopped.
        """
        if self._closed:
            raise WorkerPoolClosedError("Report worker pool is stopped")
        await self._queue.put(job_id)
        set_report_queue_depth(self._queue.qsize())
        logger.debug("report_job_queued", job_id=str(job_id), queue_depth=self._queue.qsize())

    async def join(self) -> None:
        """Wait until every queued job has been handled."""
        await self._queue.join()

    async def stop(self, *, drain: bool = True) -> None:
        """Stop accepting jobs and shut the workers down.

        Args:
            drain: Finish queued jobs first. When False, queued jobs are
                dropped and in-flight ones are cancelled.
        """
        self._closed = True
        if not self._workers:
            return

        if drain:
            await self._queue.join()
        else:
            dropped = 0
            while not self._queue.empty():
                self._queue.get_nowait()
                self._queue.task_done()
                dropped += 1
            if dropped:
                logger.warning("report_jobs_dropped", count=dropped)

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        set_report_queue_depth(0)
        logger.info("report_worker_pool_stopped", drained=drain)

    async def _worker(self, index: int) -> None:
        while True:
            job_id = await self._queue.get()
            set_report_queue_depth(self._queue.qsize())
            try:
                with LogContext(job_id=str(job_id), worker=index):
                    await self._handler(job_id)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Handlers record their own failures; this only guards the loop
                logger.error(
                    "report_worker_handler_error",
                    job_id=str(job_id),
                    error_type=type(e).__name__,
                    error=str(e),
                )
            finally:
                self._queue.task_done()
