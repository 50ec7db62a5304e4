"""Tests for the report worker pool."""

import asyncio

import pytest
from uuid_utils.compat import uuid7

from auditvault.reporting import ReportWorkerPool, WorkerPoolClosedError


class RecordingHandler:
    """Handler that records job ids, optionally blocking or failing."""

    def __init__(self, *, fail_on=None, gate: asyncio.Event | None = None):
        self.handled = []
        self.fail_on = set(fail_on or ())
        self.gate = gate

    async def __call__(self, job_id) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if job_id in self.fail_on:
            raise RuntimeError("handler blew up")
        self.handled.append(job_id)


class TestReportWorkerPool:
    """Tests for ReportWorkerPool."""

    def test_worker_count_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            ReportWorkerPool(RecordingHandler(), worker_count=0)

    @pytest.mark.asyncio
    async def test_processes_submitted_jobs(self) -> None:
        handler = RecordingHandler()
        pool = ReportWorkerPool(handler, worker_count=2, queue_size=10)
        await pool.start()

        job_ids = [uuid7() for _ in range(5)]
        for job_id in job_ids:
            await pool.submit(job_id)
        await pool.join()

        assert sorted(handler.handled) == sorted(job_ids)
        await pool.stop()

    @pytest.mark.asyncio
    async def test_handler_failure_does_not_kill_worker(self) -> None:
        bad = uuid7()
        good = uuid7()
        handler = RecordingHandler(fail_on={bad})
        pool = ReportWorkerPool(handler, worker_count=1)
        await pool.start()

        await pool.submit(bad)
        await pool.submit(good)
        await pool.join()

        assert handler.handled == [good]
        assert pool.is_running
        await pool.stop()

    @pytest.mark.asyncio
    async def test_submit_after_stop_raises(self) -> None:
        pool = ReportWorkerPool(RecordingHandler())
        await pool.start()
        await pool.stop()

        assert not pool.is_accepting
        with pytest.raises(WorkerPoolClosedError):
            await pool.submit(uuid7())

    @pytest.mark.asyncio
    async def test_stop_drains_queue(self) -> None:
        handler = RecordingHandler()
        pool = ReportWorkerPool(handler, worker_count=1, queue_size=10)
        await pool.start()

        job_ids = [uuid7() for _ in range(4)]
        for job_id in job_ids:
            await pool.submit(job_id)
        await pool.stop(drain=True)

        assert handler.handled == job_ids
        assert not pool.is_running

    @pytest.mark.asyncio
    async def test_stop_without_drain_drops_queue(self) -> None:
        gate = asyncio.Event()
        handler = RecordingHandler(gate=gate)
        pool = ReportWorkerPool(handler, worker_count=1, queue_size=10)
        await pool.start()

        for _ in range(3):
            await pool.submit(uuid7())
        await asyncio.sleep(0)

        await pool.stop(drain=False)

        assert handler.handled == []
        assert pool.queue_depth == 0

    @pytest.mark.asyncio
    async def test_full_queue_applies_backpressure(self) -> None:
        gate = asyncio.Event()
        handler = RecordingHandler(gate=gate)
        pool = ReportWorkerPool(handler, worker_count=1, queue_size=1)
        await pool.start()

        # One job in the worker, one in the queue
        await pool.submit(uuid7())
        await asyncio.sleep(0.01)
        await pool.submit(uuid7())

        blocked = asyncio.create_task(pool.submit(uuid7()))
        await asyncio.sleep(0.01)
        assert not blocked.done()

        gate.set()
        await asyncio.wait_for(blocked, timeout=1)
        await pool.join()

        assert len(handler.handled) == 3
        await pool.stop()

    @pytest.mark.asyncio
    async def test_start_twice_keeps_workers(self) -> None:
        pool = ReportWorkerPool(RecordingHandler(), worker_count=2)
        await pool.start()
        workers = list(pool._workers)

        await pool.start()

        assert pool._workers == workers
        await pool.stop()
