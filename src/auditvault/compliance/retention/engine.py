"""Retention engine for enforcing audit record retention policies.

This module provides the RetentionEngine class that:
- Evaluates enabled policies and computes their cutoffs
- Archives (optionally) and deletes matching records in one transaction
- Cleans deleted ids out of the search index on a best-effort basis
- Aggregates per-policy outcomes without letting one failure stop the run
"""

from collections.abc import Callable, Sequence
from datetime import datetime
from uuid import UUID

from auditvault.core.exceptions import PolicyNotFoundError
from auditvault.core.logging import LogContext, get_logger, log_exception
from auditvault.db.config import SessionFactory
from auditvault.db.models.base import utc_now
from auditvault.db.models.retention import RetentionPolicy
from auditvault.db.repositories.audit import AuditRecordRepository
from auditvault.db.repositories.retention import RetentionPolicyRepository
from auditvault.observability.metrics import (
    observe_policy_execution,
    record_index_cleanup_failure,
    record_retained_records,
)
from auditvault.search.index import SearchIndex
from auditvault.utils.exceptions import StoreFailureError

from .archiver import AuditArchiver
from .criteria import RetentionCriteria
from .types import PolicyExecutionDetail, RetentionExecutionResult

logger = get_logger(__name__)


class RetentionEngine:
    """Runs retention policies against the audit record store.

    Each policy executes in its own session. Selection, archival and
    deletion share one ``RetentionCriteria`` and one transaction; the search
    index is only touched after that transaction commits.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        search_index: SearchIndex,
        archiver: AuditArchiver | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the engine.

        Args:
            session_factory: Factory for store sessions
            search_index: Secondary index to clean after deletion
            archiver: Archival unit (defaults to one on the same factory)
            clock: Source of "now" for cutoff computation
        """
        self._session_factory = session_factory
        self._search_index = search_index
        self._archiver = archiver or AuditArchiver(session_factory)
        self._clock = clock

    # =========================================================================
    # Public API
    # =========================================================================

    async def execute_all(self) -> RetentionExecutionResult:
        """Execute every enabled policy in listing order.

        Never raises. A failing policy is reported in the result and does
        not stop the remaining ones; if the policies cannot be listed the
        result is empty and carries ``error_message``.
        """
        try:
            async with self._session_factory() as session:
                policies = await RetentionPolicyRepository(session).list_enabled()
        except Exception as e:
            failure = StoreFailureError(f"Could not list retention policies: {e}")
            log_exception(logger, "retention_policy_listing_failed", failure)
            return RetentionExecutionResult(error_message=str(failure))

        logger.info("retention_run_started", policy_count=len(policies))

        details = [await self._execute_policy(policy) for policy in policies]
        result = RetentionExecutionResult.from_details(details)

        logger.info(
            "retention_run_completed",
            total=result.total_policies_executed,
            successful=result.successful_policies,
            failed=result.failed_policies,
            deleted=result.total_deleted,
            archived=result.total_archived,
        )
        return result

    async def execute_one(self, policy_id: UUID) -> PolicyExecutionDetail:
        """Execute a single policy whether or not it is enabled.

        Raises:
            PolicyNotFoundError: If no policy has this id
        """
        async with self._session_factory() as session:
            policy = await RetentionPolicyRepository(session).get(policy_id)

        if policy is None:
            raise PolicyNotFoundError(policy_id)

        return await self._execute_policy(policy)

    # =========================================================================
    # Policy Execution
    # =========================================================================

    async def _execute_policy(self, policy: RetentionPolicy) -> PolicyExecutionDetail:
        with LogContext(policy_id=str(policy.id), tenant_id=str(policy.tenant_id)):
            with observe_policy_execution() as metric:
                try:
                    criteria = RetentionCriteria.from_policy(policy, self._clock())
                    logger.info(
                        "retention_policy_started",
                        policy_name=policy.name,
                        archive_before_delete=policy.archive_before_delete,
                        **criteria.describe(),
                    )
                    record_ids, archived, deleted = await self._archive_and_delete(
                        policy, criteria
                    )
                except Exception as e:
                    metric["status"] = "failed"
                    log_exception(
                        logger, "retention_policy_failed", e, policy_name=policy.name
                    )
                    return PolicyExecutionDetail.failed(policy.id, policy.name, e)

                index_cleaned = await self._cleanup_index(record_ids)

            record_retained_records(archived, deleted, index_cleaned)
            logger.info(
                "retention_policy_completed",
                archived=archived,
                deleted=deleted,
                index_cleaned=index_cleaned,
            )
            return PolicyExecutionDetail(
                policy_id=policy.id,
                policy_name=policy.name,
                success=True,
                archived_count=archived,
                deleted_count=deleted,
                index_cleaned_count=index_cleaned,
            )

    async def _archive_and_delete(
        self,
        policy: RetentionPolicy,
        criteria: RetentionCriteria,
    ) -> tuple[list[UUID], int, int]:
        """Capture ids, archive, then delete, all inside one transaction.

        Returns:
            Tuple of (captured ids, archived count, deleted count)
        """
        async with self._session_factory() as session:
            async with session.begin():
                records = AuditRecordRepository(session)
                record_ids = await records.find_ids_matching(criteria)

                archived = 0
                if policy.archive_before_delete:
                    archived = await self._archiver.archive(policy, criteria, session=session)

                deleted = await records.delete_matching(criteria)

        return record_ids, archived, deleted

    async def _cleanup_index(self, record_ids: Sequence[UUID]) -> int:
        """Remove deleted ids from the search index.

        Failures are logged and reported as 0 cleaned; they never propagate.
        """
        if not record_ids:
            return 0

        try:
            await self._search_index.delete_all_by_id(record_ids)
        except Exception as e:
            record_index_cleanup_failure()
            logger.warning(
                "search_index_cleanup_failed",
                id_count=len(record_ids),
                error_type=type(e).__name__,
                error=str(e),
            )
            return 0

        return len(record_ids)
