"""Periodic trigger for retention runs.

Runs ``RetentionEngine.execute_all`` on a fixed interval (daily by default)
in a background task.
"""

import asyncio

from auditvault.core.logging import get_logger

from .engine import RetentionEngine
from .types import RetentionExecutionResult

logger = get_logger(__name__)


class RetentionScheduler:
    """Background scheduler for retention runs.

    A failed cycle is logged and the loop waits for the next interval.
    """

    def __init__(
        self,
        engine: RetentionEngine,
        interval_seconds: float = 86400,
        *,
        enabled: bool = True,
        run_on_start: bool = False,
    ):
        self._engine = engine
        self._interval_seconds = interval_seconds
        self._enabled = enabled
        self._run_on_start = run_on_start

        self._task: asyncio.Task[None] | None = None
        self._running = False
        self._last_result: RetentionExecutionResult | None = None
        self._cycles = 0

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_result(self) -> RetentionExecutionResult | None:
        return self._last_result

    @property
    def cycles(self) -> int:
        """Number of completed cycles, successful or not."""
        return self._cycles

    async def start(self) -> None:
        if not self._enabled:
            logger.warning("retention_scheduler_disabled")
            return

        if self._running:
            logger.warning("retention_scheduler_already_running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run_loop(), name="retention_scheduler")
        logger.info("retention_scheduler_started", interval_seconds=self._interval_seconds)

    async def stop(self) -> None:
        """Cancel the loop and wait for it to exit."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        logger.info("retention_scheduler_stopped", cycles=self._cycles)

    async def run_once(self) -> RetentionExecutionResult:
        """Run one retention cycle now."""
        try:
            self._last_result = await self._engine.execute_all()
            return self._last_result
        finally:
            self._cycles += 1

    async def _run_loop(self) -> None:
        if self._run_on_start:
            await self._run_cycle()

        while self._running:
            try:
                await asyncio.sleep(self._interval_seconds)
            except asyncio.CancelledError:
                break
            if self._running:
                await self._run_cycle()

    async def _run_cycle(self) -> None:
        try:
            await self.run_once()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "retention_cycle_failed",
                error_type=type(e).__name__,
                error=str(e),
            )
