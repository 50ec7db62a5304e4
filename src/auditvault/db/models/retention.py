"""Retention policy model."""

from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from .audit import AuditCategory, AuditSeverity
from .base import Base, PortableUUID, TimestampMixin


class RetentionPolicy(TimestampMixin, Base):
    """Tenant-scoped rule deciding which audit records expire and when.

    A record is eligible when it is older than ``retention_days`` and, if
    set, belongs to ``category`` and has a severity strictly below
    ``min_severity``.
    """

    __tablename__ = "retention_policies"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    tenant_id: Mapped[UUID] = mapped_column(PortableUUID(), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    retention_days: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str | None] = mapped_column(String(30), nullable=True)
    min_severity: Mapped[str | None] = mapped_column(String(20), nullable=True)

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    archive_before_delete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_retention_policy_tenant_name"),
        CheckConstraint("retention_days > 0", name="ck_retention_policy_days_positive"),
        Index("idx_retention_policy_tenant", "tenant_id"),
        Index("idx_retention_policy_enabled", "enabled"),
    )

    @property
    def category_filter(self) -> AuditCategory | None:
        return AuditCategory(self.category) if self.category else None

    @property
    def severity_threshold(self) -> AuditSeverity | None:
        return AuditSeverity(self.min_severity) if self.min_severity else None

    def __repr__(self) -> str:
        return (
            f"<RetentionPolicy(id={self.id}, name={self.name}, "
            f"retention_days={self.retention_days}, enabled={self.enabled})>"
        )
