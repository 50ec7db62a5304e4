"""SECURITY_AUDIT report: security category events by severity."""

from auditvault.db.models.audit import AuditCategory, AuditRecord, AuditSeverity
from auditvault.db.models.report import ReportType
from auditvault.reporting.types import ReportContext

from .base import ReportGenerator, Summary, count_by, count_by_enum


class SecurityAuditReportGenerator(ReportGenerator):
    report_type = ReportType.SECURITY_AUDIT

    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        return await self._find_in_period(ctx, category=AuditCategory.SECURITY)

    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        by_severity = count_by_enum(records, AuditSeverity, lambda r: r.severity)
        return {
            "events_by_severity": by_severity,
            "critical_events": by_severity[AuditSeverity.CRITICAL.value],
            "high_severity_events": by_severity[AuditSeverity.HIGH.value],
            "events_by_action": count_by(records, lambda r: r.action),
        }
