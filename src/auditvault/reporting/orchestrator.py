"""Compliance report job orchestration.

This module provides the ReportOrchestrator class that:
- Accepts report requests and persists them as PENDING jobs
- Hands job ids to a bounded worker pool
- Drives each job PENDING -> PROCESSING -> COMPLETED | FAILED
- Serves job lookups, listings, dataset re-reads and download references
"""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any
from uuid import UUID

from auditvault.core.exceptions import (
    GenerationFailureError,
    ReportNotFoundError,
    ReportNotReadyError,
)
from auditvault.core.logging import get_logger, log_exception
from auditvault.db.config import SessionFactory
from auditvault.db.models.audit import AuditRecord
from auditvault.db.models.base import utc_now
from auditvault.db.models.report import ComplianceReportJob, ReportStatus
from auditvault.db.repositories.report import ReportJobRepository
from auditvault.observability.metrics import observe_report_generation, record_report_job

from .export import ExportWriter
from .generators.registry import ReportGeneratorRegistry
from .types import (
    CreateReportRequest,
    ExportReference,
    ExportResult,
    Page,
    ReportContext,
    ReportJobResponse,
)
from .workers import ReportWorkerPool, WorkerPoolClosedError

logger = get_logger(__name__)


class ReportOrchestrator:
    """Owns the report job lifecycle.

    Every state change is persisted in its own short session; generation
    itself runs outside any open transaction. Failures during generation end
    the job as FAILED and are never raised to a caller.

    Example:
        ```python
        orchestrator = ReportOrchestrator(session_factory, registry, writer)
        await orchestrator.start()

        job = await orchestrator.request_report(request, requested_by=user_id)
        ...
        job = await orchestrator.get_job(job.id)
        if job.status == ReportStatus.COMPLETED:
            reference = await orchestrator.resolve_download(job.id)
        ```
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        registry: ReportGeneratorRegistry,
        export_writer: ExportWriter,
        *,
        worker_count: int = 4,
        queue_size: int = 100,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._session_factory = session_factory
        self._registry = registry
        self._export_writer = export_writer
        self._clock = clock
        self.workers = ReportWorkerPool(
            self.process_job,
            worker_count=worker_count,
            queue_size=queue_size,
        )

    async def start(self) -> None:
        await self.workers.start()

    async def stop(self, *, drain: bool = True) -> None:
        await self.workers.stop(drain=drain)

    # =========================================================================
    # Job Requests
    # =========================================================================

    async def request_report(
        self,
        request: CreateReportRequest,
        requested_by: UUID | None = None,
    ) -> ReportJobResponse:
        """Persist a PENDING job and queue it for generation.

        Args:
            request: Validated report request
            requested_by: User asking for the report

        Returns:
            The job as persisted, still PENDING

        Raises:
            InvalidReportTypeError: If no generator serves the requested type
            WorkerPoolClosedError: If the worker pool has been stopped; nothing
                is persisted in that case
        """
        self._registry.get(request.report_type)
        if not self.workers.is_accepting:
            raise WorkerPoolClosedError("Report worker pool is stopped")

        job = ComplianceReportJob(
            tenant_id=request.tenant_id,
            name=request.name,
            report_type=request.report_type.value,
            status=ReportStatus.PENDING.value,
            period_start=request.period_start,
            period_end=request.period_end,
            requested_by=requested_by,
            parameters=request.parameters or None,
            created_at=self._clock(),
        )
        async with self._session_factory() as session:
            await ReportJobRepository(session).add(job, commit=True)
        response = ReportJobResponse.model_validate(job)

        record_report_job(job.report_type, ReportStatus.PENDING.value)
        logger.info(
            "report_requested",
            job_id=str(job.id),
            tenant_id=str(job.tenant_id),
            report_type=job.report_type,
        )

        try:
            await self.workers.submit(job.id)
        except Exception as e:
            # Stopped between the check and the submit; nothing will pick the job up
            log_exception(logger, "report_dispatch_failed", e, job_id=str(job.id))
            await self._abandon(job.id, str(e) or type(e).__name__)
            raise
        return response

    # =========================================================================
    # Generation
    # =========================================================================

    async def process_job(self, job_id: UUID) -> None:
        """Generate one job to a terminal state. Never raises."""
        try:
            started = await self._start_processing(job_id)
        except Exception as e:
            log_exception(logger, "report_start_failed", e, job_id=str(job_id))
            return
        if started is None:
            return

        ctx, job_name = started
        with observe_report_generation(ctx.report_type.value) as metric:
            try:
                summary, export = await self._generate(ctx, job_name)
                await self._complete(job_id, summary, export)
            except Exception as e:
                metric["status"] = ReportStatus.FAILED.value
                failure = _as_generation_failure(e)
                log_exception(logger, "report_generation_failed", failure, job_id=str(job_id))
                await self._fail(job_id, str(failure))

    async def _start_processing(self, job_id: UUID) -> tuple[ReportContext, str] | None:
        async with self._session_factory() as session:
            job = await ReportJobRepository(session).get(job_id)
            if job is None:
                logger.warning("report_job_missing", job_id=str(job_id))
                return None
            if job.status_value != ReportStatus.PENDING:
                logger.warning("report_job_not_pending", job_id=str(job_id), status=job.status)
                return None

            job.transition_to(ReportStatus.PROCESSING)
            job.started_at = self._clock()
            await session.commit()

            logger.info("report_processing", job_id=str(job_id), report_type=job.report_type)
            return ReportContext.from_job(job), job.name

    async def _generate(
        self, ctx: ReportContext, job_name: str
    ) -> tuple[dict[str, Any], ExportResult]:
        generator = self._registry.get(ctx.report_type)
        summary = await generator.generate_summary(ctx)
        records = await generator.load_data(ctx)
        export = await self._export_writer.export(records, job_name, ctx.job_id)
        return summary, export

    async def _complete(
        self, job_id: UUID, summary: dict[str, Any], export: ExportResult
    ) -> None:
        async with self._session_factory() as session:
            job = await ReportJobRepository(session).get(job_id)
            if job is None:
                raise ReportNotFoundError(job_id)
            job.transition_to(ReportStatus.COMPLETED)
            job.summary = summary
            job.file_path = export.file_path
            job.file_url = export.file_url
            job.file_size = export.file_size
            job.completed_at = self._clock()
            await session.commit()

        logger.info("report_completed", job_id=str(job_id), file_size=export.file_size)

    async def _fail(self, job_id: UUID, error_message: str) -> None:
        try:
            async with self._session_factory() as session:
                job = await ReportJobRepository(session).get(job_id)
                if job is None:
                    return
                if job.status_value != ReportStatus.PROCESSING:
                    # Completion already committed; the failure came after it
                    logger.warning(
                        "report_failure_after_terminal", job_id=str(job_id), status=job.status
                    )
                    return
                job.transition_to(ReportStatus.FAILED)
                job.error_message = error_message
                job.completed_at = self._clock()
                await session.commit()
        except Exception as e:
            log_exception(logger, "report_failure_not_persisted", e, job_id=str(job_id))

    async def _abandon(self, job_id: UUID, error_message: str) -> None:
        """End a job that was persisted but never reached a worker."""
        try:
            async with self._session_factory() as session:
                job = await ReportJobRepository(session).get(job_id)
                if job is None or job.status_value != ReportStatus.PENDING:
                    return
                job.transition_to(ReportStatus.PROCESSING)
                job.transition_to(ReportStatus.FAILED)
                job.error_message = error_message
                job.started_at = job.completed_at = self._clock()
                await session.commit()
        except Exception as e:
            log_exception(logger, "report_failure_not_persisted", e, job_id=str(job_id))
            return
        record_report_job(job.report_type, ReportStatus.FAILED.value)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_job(self, job_id: UUID, tenant_id: UUID | None = None) -> ReportJobResponse:
        """Raises ReportNotFoundError if absent (or owned by another tenant)."""
        return ReportJobResponse.model_validate(await self._load_job(job_id, tenant_id))

    async def list_jobs(
        self,
        tenant_id: UUID,
        page: int = 0,
        size: int = 20,
    ) -> Page[ReportJobResponse]:
        """Jobs for a tenant, newest first. ``page`` is zero-based."""
        page = max(page, 0)
        size = max(size, 1)
        async with self._session_factory() as session:
            repo = ReportJobRepository(session)
            jobs = await repo.list_by_tenant(tenant_id, limit=size, offset=page * size)
            total = await repo.count_by_tenant(tenant_id)

        return Page[ReportJobResponse](
            items=[ReportJobResponse.model_validate(job) for job in jobs],
            page=page,
            size=size,
            total=total,
        )

    async def resolve_download(
        self, job_id: UUID, tenant_id: UUID | None = None
    ) -> ExportReference:
        """Export reference for a completed job.

        Raises:
            ReportNotFoundError: If the job or its export file does not exist
            ReportNotReadyError: If the job has not completed
        """
        job = await self._load_job(job_id, tenant_id)
        if job.status_value != ReportStatus.COMPLETED or not job.file_path:
            raise ReportNotReadyError(job_id, job.status)

        path = Path(job.file_path)
        if not path.is_file():
            logger.warning("report_export_missing", job_id=str(job_id), file_path=job.file_path)
            raise ReportNotFoundError(job_id)

        return ExportReference(
            job_id=job.id,
            file_name=path.name,
            file_path=job.file_path,
            file_url=job.file_url or "",
            file_size=job.file_size,
        )

    async def get_report_data(
        self, job_id: UUID, tenant_id: UUID | None = None
    ) -> list[AuditRecord]:
        """Re-run the job's dataset query.

        The records reflect the store now, not at generation time.

        Raises:
            ReportNotFoundError: If the job does not exist
            InvalidReportTypeError: If the job's type is no longer served
        """
        job = await self._load_job(job_id, tenant_id)
        generator = self._registry.get(job.report_type)
        return await generator.generate_data(ReportContext.from_job(job))

    async def _load_job(self, job_id: UUID, tenant_id: UUID | None) -> ComplianceReportJob:
        async with self._session_factory() as session:
            repo = ReportJobRepository(session)
            if tenant_id is None:
                job = await repo.get(job_id)
            else:
                job = await repo.get_for_tenant(tenant_id, job_id)
        if job is None:
            raise ReportNotFoundError(job_id)
        return job


def _as_generation_failure(exc: Exception) -> GenerationFailureError:
    if isinstance(exc, GenerationFailureError):
        return exc
    failure = GenerationFailureError(str(exc) or type(exc).__name__)
    failure.__cause__ = exc
    return failure
