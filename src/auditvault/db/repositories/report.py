"""Repository for compliance report jobs."""

from uuid import UUID

from sqlalchemy import select

from auditvault.db.models.report import ComplianceReportJob, ReportStatus

from .base import BaseRepository


class ReportJobRepository(BaseRepository[ComplianceReportJob]):
    """Persistence for report jobs."""

    async def get_for_tenant(
        self, tenant_id: UUID, job_id: UUID
    ) -> ComplianceReportJob | None:
        job = await self.get(job_id)
        if job is None or job.tenant_id != tenant_id:
            return None
        return job

    async def list_by_tenant(
        self,
        tenant_id: UUID,
        *,
        limit: int = 20,
        offset: int = 0,
    ) -> list[ComplianceReportJob]:
        """Jobs for a tenant, newest first."""
        stmt = (
            select(ComplianceReportJob)
            .where(ComplianceReportJob.tenant_id == tenant_id)
            .order_by(ComplianceReportJob.created_at.desc(), ComplianceReportJob.id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_by_tenant(self, tenant_id: UUID) -> int:
        return await self.count_where(ComplianceReportJob.tenant_id == tenant_id)

    async def count_by_status(self, status: ReportStatus) -> int:
        return await self.count_where(ComplianceReportJob.status == status.value)
