"""Retention type definitions.

This module defines the request and result types for the retention engine:
- PolicyExecutionDetail: Outcome of running one policy
- RetentionExecutionResult: Aggregate outcome of a run over all enabled policies
- CreateRetentionPolicyRequest / UpdateRetentionPolicyRequest: Admin requests
- RetentionPolicyResponse: Read model of a stored policy
"""

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from auditvault.db.models.audit import AuditCategory, AuditSeverity


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PolicyExecutionDetail(BaseModel):
    """Outcome of executing a single retention policy."""

    policy_id: UUID
    policy_name: str

    success: bool
    """False when archive or delete failed; index cleanup never affects this."""

    archived_count: int = 0
    deleted_count: int = 0

    index_cleaned_count: int = 0
    """Ids removed from the search index; 0 when cleanup failed."""

    error_message: str | None = None
    executed_at: datetime = Field(default_factory=_utc_now)

    @classmethod
    def failed(cls, policy_id: UUID, policy_name: str, error: BaseException) -> "PolicyExecutionDetail":
        return cls(
            policy_id=policy_id,
            policy_name=policy_name,
            success=False,
            error_message=str(error) or type(error).__name__,
        )


class RetentionExecutionResult(BaseModel):
    """Aggregate outcome of running every enabled retention policy."""

    total_policies_executed: int = 0
    successful_policies: int = 0
    failed_policies: int = 0
    details: list[PolicyExecutionDetail] = Field(default_factory=list)

    error_message: str | None = None
    """Set when the enabled policies could not be listed; no policy ran."""

    executed_at: datetime = Field(default_factory=_utc_now)

    @classmethod
    def from_details(cls, details: list[PolicyExecutionDetail]) -> "RetentionExecutionResult":
        successful = sum(1 for detail in details if detail.success)
        return cls(
            total_policies_executed=len(details),
            successful_policies=successful,
            failed_policies=len(details) - successful,
            details=details,
        )

    @property
    def total_deleted(self) -> int:
        return sum(detail.deleted_count for detail in self.details)

    @property
    def total_archived(self) -> int:
        return sum(detail.archived_count for detail in self.details)


class CreateRetentionPolicyRequest(BaseModel):
    """Request to create a retention policy."""

    tenant_id: UUID
    name: str = Field(min_length=1, max_length=100)
    description: str | None = None
    retention_days: int = Field(gt=0)
    category: AuditCategory | None = None
    min_severity: AuditSeverity | None = None
    enabled: bool = True
    archive_before_delete: bool = False


class UpdateRetentionPolicyRequest(BaseModel):
    """Partial update; fields left as None keep their stored value."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    retention_days: int | None = Field(default=None, gt=0)
    category: AuditCategory | None = None
    min_severity: AuditSeverity | None = None
    enabled: bool | None = None
    archive_before_delete: bool | None = None


class RetentionPolicyResponse(BaseModel):
    """Stored retention policy as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    name: str
    description: str | None
    retention_days: int
    category: AuditCategory | None
    min_severity: AuditSeverity | None
    enabled: bool
    archive_before_delete: bool
    created_at: datetime
    updated_at: datetime
