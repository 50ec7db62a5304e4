"""Archival of audit records ahead of retention deletion."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from auditvault.core.logging import get_logger
from auditvault.db.config import SessionFactory
from auditvault.db.models.audit import ArchivedAuditRecord
from auditvault.db.models.base import utc_now
from auditvault.db.models.retention import RetentionPolicy
from auditvault.db.repositories.audit import (
    ArchivedAuditRecordRepository,
    AuditRecordRepository,
)

from .criteria import RetentionCriteria

logger = get_logger(__name__)


class AuditArchiver:
    """Copies audit records selected by a policy into the archive table.

    Copies keep the original id and every field; only ``archived_at`` and
    ``archived_by_policy_id`` are added. Writes are upserts keyed by id, so
    archiving the same window twice leaves one archived row per record.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def archive(
        self,
        policy: RetentionPolicy,
        criteria: RetentionCriteria | None = None,
        *,
        session: AsyncSession | None = None,
    ) -> int:
        """Archive every record the policy currently selects.

        Args:
            policy: Policy whose id is stamped on the archived copies
            criteria: Selection to use; built from the policy when omitted
            session: Session to write through. When given, the caller owns the
                transaction; otherwise a session is opened and committed here.

        Returns:
            Number of records archived (0 when nothing matched)
        """
        criteria = criteria or RetentionCriteria.from_policy(policy)

        if session is not None:
            return await self._archive(session, policy, criteria)

        async with self._session_factory() as own_session:
            count = await self._archive(own_session, policy, criteria)
            await own_session.commit()
            return count

    async def _archive(
        self,
        session: AsyncSession,
        policy: RetentionPolicy,
        criteria: RetentionCriteria,
    ) -> int:
        records = await AuditRecordRepository(session).find_matching(criteria)
        if not records:
            return 0

        archived_at = utc_now()
        copies = [
            ArchivedAuditRecord.from_record(record, policy.id, archived_at) for record in records
        ]
        count = await ArchivedAuditRecordRepository(session).save_all(copies)

        logger.info(
            "audit_records_archived",
            policy_id=str(policy.id),
            count=count,
            **criteria.describe(),
        )
        return count

    async def count_by_policy(self, policy_id: UUID) -> int:
        async with self._session_factory() as session:
            return await ArchivedAuditRecordRepository(session).count_by_policy(policy_id)
