"""Record selection criteria shared by retention selection, archival and deletion.

A single ``RetentionCriteria`` is built per policy execution and handed to
every store operation, so "which records match" is decided in one place.
The four predicate variants follow from which optional filters are set:

    category and min_severity -> older than cutoff, in category, severity below threshold
    category only             -> older than cutoff, in category
    min_severity only         -> older than cutoff, severity below threshold
    neither                   -> older than cutoff

Severity matching is strictly below the threshold: a policy with
``min_severity=HIGH`` removes LOW and MEDIUM records and never touches HIGH
or CRITICAL ones.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import UUID

from sqlalchemy import ColumnElement, and_

from auditvault.db.models.audit import (
    AuditCategory,
    AuditRecord,
    AuditSeverity,
)
from auditvault.db.models.retention import RetentionPolicy

EARLIEST_CUTOFF = datetime.min.replace(tzinfo=UTC)


class CriteriaVariant(str, Enum):
    """Which of the four predicate shapes a criteria object uses."""

    CATEGORY_AND_SEVERITY = "category_and_severity"
    CATEGORY = "category"
    SEVERITY = "severity"
    AGE_ONLY = "age_only"


def compute_cutoff(retention_days: int, now: datetime | None = None) -> datetime:
    """Records created strictly before this instant are eligible.

    Windows reaching past the start of the calendar clamp to
    ``EARLIEST_CUTOFF``, which no record predates.
    """
    now = now or datetime.now(UTC)
    try:
        return now - timedelta(days=retention_days)
    except OverflowError:
        return EARLIEST_CUTOFF


@dataclass(frozen=True)
class RetentionCriteria:
    """Immutable description of the records a policy applies to.

    A ``tenant_id`` of None selects across all tenants.
    """

    tenant_id: UUID | None
    cutoff: datetime
    category: AuditCategory | None = None
    min_severity: AuditSeverity | None = None

    @classmethod
    def from_policy(
        cls,
        policy: RetentionPolicy,
        now: datetime | None = None,
    ) -> "RetentionCriteria":
        return cls(
            tenant_id=policy.tenant_id,
            cutoff=compute_cutoff(policy.retention_days, now),
            category=policy.category_filter,
            min_severity=policy.severity_threshold,
        )

    @property
    def variant(self) -> CriteriaVariant:
        if self.category is not None and self.min_severity is not None:
            return CriteriaVariant.CATEGORY_AND_SEVERITY
        if self.category is not None:
            return CriteriaVariant.CATEGORY
        if self.min_severity is not None:
            return CriteriaVariant.SEVERITY
        return CriteriaVariant.AGE_ONLY

    def where_clause(self) -> ColumnElement[bool]:
        """SQL predicate over ``audit_records`` for this criteria."""
        conditions: list[ColumnElement[bool]] = [AuditRecord.created_at < self.cutoff]
        if self.tenant_id is not None:
            conditions.append(AuditRecord.tenant_id == self.tenant_id)
        if self.category is not None:
            conditions.append(AuditRecord.category == self.category.value)
        if self.min_severity is not None:
            # Empty IN list for LOW compiles to a false predicate
            below = [level.value for level in self.min_severity.levels_below()]
            conditions.append(AuditRecord.severity.in_(below))
        return and_(*conditions)

    def matches(self, record: AuditRecord) -> bool:
        """In-memory equivalent of ``where_clause`` for a loaded record."""
        if self.tenant_id is not None and record.tenant_id != self.tenant_id:
            return False
        if not _before(record.created_at, self.cutoff):
            return False
        if self.category is not None and record.category != self.category.value:
            return False
        if self.min_severity is not None:
            return record.severity_level.rank < self.min_severity.rank
        return True

    def describe(self) -> dict[str, str | None]:
        """Loggable view of the criteria."""
        return {
            "variant": self.variant.value,
            "cutoff": self.cutoff.isoformat(),
            "category": self.category.value if self.category else None,
            "min_severity": self.min_severity.value if self.min_severity else None,
        }


def _before(created_at: datetime, cutoff: datetime) -> bool:
    # SQLite hands back naive UTC datetimes
    if created_at.tzinfo is None and cutoff.tzinfo is not None:
        created_at = created_at.replace(tzinfo=UTC)
    return created_at < cutoff
