"""Core types for compliance report generation.

This module defines the request/response models, the per-job generation
context, and the export result types used by the reporting pipeline.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from auditvault.db.models.audit import AuditRecord
from auditvault.db.models.report import ComplianceReportJob, ReportStatus, ReportType

T = TypeVar("T")


# =============================================================================
# Generation Context
# =============================================================================


@dataclass
class ReportContext:
    """Everything a generator needs for one job.

    The dataset is loaded at most once per context; summary and export both
    read the cached copy so they always describe the same records.
    """

    job_id: UUID
    tenant_id: UUID
    report_type: ReportType
    period_start: datetime
    period_end: datetime
    parameters: dict[str, Any] = field(default_factory=dict)

    _dataset: list[AuditRecord] | None = field(default=None, init=False, repr=False)

    @classmethod
    def from_job(cls, job: ComplianceReportJob) -> "ReportContext":
        return cls(
            job_id=job.id,
            tenant_id=job.tenant_id,
            report_type=ReportType(job.report_type),
            period_start=job.period_start,
            period_end=job.period_end,
            parameters=dict(job.parameters or {}),
        )

    @property
    def is_loaded(self) -> bool:
        return self._dataset is not None

    @property
    def dataset(self) -> list[AuditRecord] | None:
        return self._dataset

    def cache_dataset(self, records: list[AuditRecord]) -> None:
        self._dataset = records


# =============================================================================
# Export
# =============================================================================


class ExportResult(BaseModel):
    """Where an export was written and how large it is."""

    file_path: str
    file_url: str
    file_size: int = Field(ge=0)


class ExportReference(BaseModel):
    """Download handle for a completed report."""

    job_id: UUID
    file_name: str
    file_path: str
    file_url: str
    file_size: int | None = None


# =============================================================================
# Requests / Responses
# =============================================================================


class CreateReportRequest(BaseModel):
    """Request to generate a compliance report."""

    tenant_id: UUID
    name: str = Field(min_length=1, max_length=255)
    report_type: ReportType
    period_start: datetime
    period_end: datetime
    parameters: dict[str, Any] = Field(default_factory=dict)

    @field_validator("period_start", "period_end")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    @model_validator(mode="after")
    def _check_period(self) -> "CreateReportRequest":
        if self.period_start > self.period_end:
            raise ValueError("period_start must not be after period_end")
        return self


class ReportJobResponse(BaseModel):
    """Report job as returned to callers."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    name: str
    report_type: ReportType
    status: ReportStatus
    period_start: datetime
    period_end: datetime
    requested_by: UUID | None = None
    parameters: dict[str, Any] | None = None
    summary: dict[str, Any] | None = None
    file_url: str | None = None
    file_size: int | None = None
    error_message: str | None = None
    created_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None


class Page(BaseModel, Generic[T]):
    """One page of a listing, zero-indexed."""

    items: list[T]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total + self.size - 1) // self.size
