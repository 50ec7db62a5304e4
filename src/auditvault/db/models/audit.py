"""Audit record models for compliance and accountability."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from .base import Base, PortableJSON, PortableUUID, utc_now


class AuditSeverity(str, Enum):
    """Severity levels for audit records, ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """Ordinal position used for threshold comparisons."""
        return _SEVERITY_ORDER.index(self)

    def levels_below(self) -> list["AuditSeverity"]:
        """Severities strictly below this one (LOW has none)."""
        return list(_SEVERITY_ORDER[: self.rank])


_SEVERITY_ORDER: tuple[AuditSeverity, ...] = (
    AuditSeverity.LOW,
    AuditSeverity.MEDIUM,
    AuditSeverity.HIGH,
    AuditSeverity.CRITICAL,
)


class AuditCategory(str, Enum):
    """Closed set of audit record categories."""

    AUTHENTICATION = "AUTHENTICATION"
    AUTHORIZATION = "AUTHORIZATION"
    DATA_ACCESS = "DATA_ACCESS"
    DATA_MODIFICATION = "DATA_MODIFICATION"
    CONFIGURATION = "CONFIGURATION"
    SECURITY = "SECURITY"
    SYSTEM = "SYSTEM"
    COMPLIANCE = "COMPLIANCE"


class AuditRecordColumns:
    """Columns shared by live and archived audit records.

    Both tables carry the same shape so an archived copy can be produced
    field-for-field without parsing the opaque state and metadata blobs.
    """

    tenant_id: Mapped[UUID] = mapped_column(PortableUUID(), nullable=False)

    # Actor
    actor_id: Mapped[UUID] = mapped_column(PortableUUID(), nullable=False)
    actor_email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    actor_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # What happened
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[str] = mapped_column(String(255), nullable=False)
    resource_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Opaque payloads, never parsed by retention
    event_metadata: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", PortableJSON(), nullable=True
    )
    previous_state: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON(), nullable=True)
    new_state: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON(), nullable=True)

    # Network/session context
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)  # IPv6 support
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    severity: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AuditSeverity.LOW.value
    )
    category: Mapped[str] = mapped_column(String(30), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    @property
    def severity_level(self) -> AuditSeverity:
        return AuditSeverity(self.severity)

    @property
    def category_value(self) -> AuditCategory:
        return AuditCategory(self.category)


# Every column an archived copy carries over verbatim from the live record
COPIED_COLUMNS: tuple[str, ...] = (
    "id",
    "tenant_id",
    "actor_id",
    "actor_email",
    "actor_name",
    "action",
    "resource_type",
    "resource_id",
    "resource_name",
    "event_metadata",
    "previous_state",
    "new_state",
    "ip_address",
    "user_agent",
    "session_id",
    "severity",
    "category",
    "created_at",
)


class AuditRecord(AuditRecordColumns, Base):
    """Immutable audit log entry.

    Audit records are append-only: created by ingestion, read by reporting,
    and removed or migrated to ``ArchivedAuditRecord`` by retention.
    """

    __tablename__ = "audit_records"

    # UUIDv7 is time-ordered, making audit records naturally sortable by ID
    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)

    __table_args__ = (
        Index("idx_audit_record_tenant", "tenant_id"),
        Index("idx_audit_record_actor", "actor_id"),
        Index("idx_audit_record_action", "action"),
        Index("idx_audit_record_resource", "resource_type", "resource_id"),
        Index("idx_audit_record_created", "created_at"),
        Index("idx_audit_record_retention", "tenant_id", "created_at", "category", "severity"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditRecord(id={self.id}, action={self.action}, "
            f"category={self.category}, severity={self.severity})>"
        )


class ArchivedAuditRecord(AuditRecordColumns, Base):
    """Value copy of an audit record moved out of the live table by retention.

    The original record id is preserved so lookups stay stable across archival.
    """

    __tablename__ = "archived_audit_records"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True)

    archived_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    archived_by_policy_id: Mapped[UUID] = mapped_column(PortableUUID(), nullable=False)

    __table_args__ = (
        Index("idx_archived_tenant", "tenant_id"),
        Index("idx_archived_actor", "actor_id"),
        Index("idx_archived_action", "action"),
        Index("idx_archived_resource", "resource_type", "resource_id"),
        Index("idx_archived_created", "created_at"),
        Index("idx_archived_policy", "archived_by_policy_id"),
    )

    @classmethod
    def from_record(
        cls,
        record: AuditRecord,
        policy_id: UUID,
        archived_at: datetime | None = None,
    ) -> "ArchivedAuditRecord":
        """Copy a live record, keeping every field and its id."""
        values = {column: getattr(record, column) for column in COPIED_COLUMNS}
        return cls(
            **values,
            archived_at=archived_at or utc_now(),
            archived_by_policy_id=policy_id,
        )

    def __repr__(self) -> str:
        return (
            f"<ArchivedAuditRecord(id={self.id}, action={self.action}, "
            f"policy={self.archived_by_policy_id})>"
        )
