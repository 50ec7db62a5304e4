"""Repository layer for auditvault persistence."""

from .audit import ArchivedAuditRecordRepository, AuditRecordRepository
from .base import BaseRepository
from .report import ReportJobRepository
from .retention import RetentionPolicyRepository

__all__ = [
    "BaseRepository",
    "AuditRecordRepository",
    "ArchivedAuditRecordRepository",
    "RetentionPolicyRepository",
    "ReportJobRepository",
]
