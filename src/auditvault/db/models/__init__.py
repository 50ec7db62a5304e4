"""Database models for auditvault."""

from .audit import ArchivedAuditRecord, AuditCategory, AuditRecord, AuditSeverity
from .base import Base, TimestampMixin, utc_now
from .report import ComplianceReportJob, ReportStatus, ReportType
from .retention import RetentionPolicy

__all__ = [
    "Base",
    "TimestampMixin",
    "utc_now",
    "AuditRecord",
    "ArchivedAuditRecord",
    "AuditCategory",
    "AuditSeverity",
    "RetentionPolicy",
    "ComplianceReportJob",
    "ReportStatus",
    "ReportType",
]
