"""COMPLIANCE_SUMMARY report: whole-tenant overview with a compliance score."""

from auditvault.db.models.audit import AuditCategory, AuditRecord, AuditSeverity
from auditvault.db.models.report import ReportType
from auditvault.reporting.types import ReportContext

from .base import ReportGenerator, Summary, count_by, count_by_enum, unique_emails

CRITICAL_PENALTY = 5
CRITICAL_PENALTY_CAP = 30
HIGH_PENALTY = 2
HIGH_PENALTY_CAP = 20


def compliance_score(total_events: int, critical_events: int, high_events: int) -> float:
    """Score in [0, 100]; each critical event costs 5 (max 30), each high 2 (max 20).

    An empty period scores 100.
    """
    if total_events == 0:
        return 100.0
    score = 100.0
    score -= min(critical_events * CRITICAL_PENALTY, CRITICAL_PENALTY_CAP)
    score -= min(high_events * HIGH_PENALTY, HIGH_PENALTY_CAP)
    return max(0.0, score)


class ComplianceSummaryReportGenerator(ReportGenerator):
    """Breakdown of every event in the period."""

    report_type = ReportType.COMPLIANCE_SUMMARY

    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        return await self._find_in_period(ctx)

    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        by_category = count_by_enum(records, AuditCategory, lambda r: r.category)
        by_severity = count_by_enum(records, AuditSeverity, lambda r: r.severity)
        critical = by_severity[AuditSeverity.CRITICAL.value]
        high = by_severity[AuditSeverity.HIGH.value]

        return {
            "events_by_category": by_category,
            "events_by_severity": by_severity,
            "events_by_action": count_by(records, lambda r: r.action),
            "unique_users": len(unique_emails(records)),
            "critical_events": critical,
            "high_severity_events": high,
            "security_events": by_category[AuditCategory.SECURITY.value],
            "authentication_events": by_category[AuditCategory.AUTHENTICATION.value],
            "compliance_score": compliance_score(len(records), critical, high),
        }
