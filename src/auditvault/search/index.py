"""Secondary search index over audit records.

The index is eventually consistent with the record store. Retention removes
deleted ids from it on a best-effort basis; callers must treat every index
failure as non-fatal.
"""

from collections.abc import Iterable, Sequence
from typing import Any, Protocol
from uuid import UUID

from auditvault.core.logging import get_logger
from auditvault.db.models.audit import AuditRecord

logger = get_logger(__name__)


# =============================================================================
# Index Protocol
# =============================================================================


class SearchIndex(Protocol):
    """Protocol for the audit record search index."""

    async def delete_all_by_id(self, ids: Sequence[UUID]) -> None:
        """Remove the given record ids from the index.

        Ids not present in the index are ignored.
        """
        ...


class InMemorySearchIndex:
    """In-memory implementation of SearchIndex for testing and local runs."""

    def __init__(self) -> None:
        self._documents: dict[UUID, dict[str, Any]] = {}

    async def index(self, records: Iterable[AuditRecord]) -> int:
        """Add or replace documents for the given records."""
        count = 0
        for record in records:
            self._documents[record.id] = {
                "tenant_id": str(record.tenant_id),
                "action": record.action,
                "category": record.category,
                "severity": record.severity,
                "actor_email": record.actor_email,
                "resource_type": record.resource_type,
                "resource_id": record.resource_id,
            }
            count += 1
        return count

    async def delete_all_by_id(self, ids: Sequence[UUID]) -> None:
        removed = 0
        for record_id in ids:
            if self._documents.pop(record_id, None) is not None:
                removed += 1
        logger.debug("search_index_documents_removed", requested=len(ids), removed=removed)

    def contains(self, record_id: UUID) -> bool:
        return record_id in self._documents

    def __len__(self) -> int:
        return len(self._documents)
