"""Repositories for live and archived audit records."""

from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import delete, select

from auditvault.db.models.audit import ArchivedAuditRecord, AuditCategory, AuditRecord

from .base import BaseRepository

if TYPE_CHECKING:
    from auditvault.compliance.retention.criteria import RetentionCriteria


class AuditRecordRepository(BaseRepository[AuditRecord]):
    """Access to the live audit table.

    Retention operations take a ``RetentionCriteria`` so selection, archival
    and deletion always evaluate the same predicate.
    """

    async def create(self, record: AuditRecord) -> AuditRecord:
        return await self.add(record)

    async def find_matching(self, criteria: "RetentionCriteria") -> list[AuditRecord]:
        stmt = (
            select(AuditRecord)
            .where(criteria.where_clause())
            .order_by(AuditRecord.created_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_ids_matching(self, criteria: "RetentionCriteria") -> list[UUID]:
        stmt = select(AuditRecord.id).where(criteria.where_clause())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_matching(self, criteria: "RetentionCriteria") -> int:
        return await self.count_where(criteria.where_clause())

    async def delete_matching(self, criteria: "RetentionCriteria") -> int:
        """Delete every record the criteria selects.

        Returns:
            Number of rows removed
        """
        stmt = (
            delete(AuditRecord)
            .where(criteria.where_clause())
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def find_in_period(
        self,
        tenant_id: UUID,
        period_start: datetime,
        period_end: datetime,
        category: AuditCategory | None = None,
    ) -> list[AuditRecord]:
        """Records created within [period_start, period_end], newest first.

        Args:
            tenant_id: Tenant whose records are read
            period_start: Inclusive lower bound
            period_end: Inclusive upper bound
            category: Optional category restriction

        Returns:
            Matching records ordered by created_at descending
        """
        stmt = select(AuditRecord).where(
            AuditRecord.tenant_id == tenant_id,
            AuditRecord.created_at.between(period_start, period_end),
        )
        if category is not None:
            stmt = stmt.where(AuditRecord.category == category.value)
        stmt = stmt.order_by(AuditRecord.created_at.desc(), AuditRecord.id.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())


class ArchivedAuditRecordRepository(BaseRepository[ArchivedAuditRecord]):
    """Access to the archive table."""

    async def save_all(self, records: Sequence[ArchivedAuditRecord]) -> int:
        """Upsert archived copies keyed by the original record id.

        Re-archiving a record that is already present overwrites the stored
        copy instead of raising, so a retried run leaves one row per id.

        Returns:
            Number of records written
        """
        for record in records:
            await self.db.merge(record)
        await self.db.flush()
        return len(records)

    async def count_by_policy(self, policy_id: UUID) -> int:
        return await self.count_where(ArchivedAuditRecord.archived_by_policy_id == policy_id)

    async def count_by_tenant(self, tenant_id: UUID) -> int:
        return await self.count_where(ArchivedAuditRecord.tenant_id == tenant_id)
