"""Compliance report job model."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from auditvault.core.exceptions import InvalidStatusTransitionError

from .base import Base, PortableJSON, PortableUUID, utc_now


class ReportType(str, Enum):
    """Kinds of compliance report; each is served by exactly one generator."""

    ACCESS_LOG = "ACCESS_LOG"
    ADMIN_ACTIONS = "ADMIN_ACTIONS"
    COMPLIANCE_SUMMARY = "COMPLIANCE_SUMMARY"
    DATA_EXPORT = "DATA_EXPORT"
    LOGIN_HISTORY = "LOGIN_HISTORY"
    SECURITY_AUDIT = "SECURITY_AUDIT"
    USER_ACTIVITY = "USER_ACTIVITY"


class ReportStatus(str, Enum):
    """Lifecycle of a report job. COMPLETED and FAILED are terminal."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (ReportStatus.COMPLETED, ReportStatus.FAILED)

    def can_transition_to(self, target: "ReportStatus") -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.PROCESSING}),
    ReportStatus.PROCESSING: frozenset({ReportStatus.COMPLETED, ReportStatus.FAILED}),
    ReportStatus.COMPLETED: frozenset(),
    ReportStatus.FAILED: frozenset(),
}


class ComplianceReportJob(Base):
    """A requested compliance report and, once generated, its result.

    Created PENDING by a request and mutated only by the report orchestrator.
    """

    __tablename__ = "compliance_report_jobs"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    tenant_id: Mapped[UUID] = mapped_column(PortableUUID(), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    report_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ReportStatus.PENDING.value
    )

    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    requested_by: Mapped[UUID | None] = mapped_column(PortableUUID(), nullable=True)
    parameters: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON(), nullable=True)

    # Result
    summary: Mapped[dict[str, Any] | None] = mapped_column(PortableJSON(), nullable=True)
    file_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    file_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_report_job_tenant_created", "tenant_id", "created_at"),
        Index("idx_report_job_status", "status"),
    )

    @property
    def status_value(self) -> ReportStatus:
        return ReportStatus(self.status)

    def transition_to(self, target: ReportStatus) -> None:
        """Move the job forward in its lifecycle.

        Raises:
            InvalidStatusTransitionError: If the move is not PENDING->PROCESSING
                or PROCESSING->COMPLETED/FAILED.
        """
        current = self.status_value
        if not current.can_transition_to(target):
            raise InvalidStatusTransitionError(current.value, target.value)
        self.status = target.value

    def __repr__(self) -> str:
        return (
            f"<ComplianceReportJob(id={self.id}, type={self.report_type}, "
            f"status={self.status})>"
        )
