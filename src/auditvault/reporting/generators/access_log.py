"""ACCESS_LOG report: data access events."""

from auditvault.db.models.audit import AuditCategory, AuditRecord
from auditvault.db.models.report import ReportType
from auditvault.reporting.types import ReportContext

from .base import ReportGenerator, Summary, action_contains, count_by, unique_emails

READ_FRAGMENTS = ("READ", "VIEW", "GET")
WRITE_FRAGMENTS = ("WRITE", "CREATE", "UPDATE", "DELETE")


class AccessLogReportGenerator(ReportGenerator):
    """Who accessed which resources, split into read and write operations."""

    report_type = ReportType.ACCESS_LOG

    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        return await self._find_in_period(ctx, category=AuditCategory.DATA_ACCESS)

    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        return {
            "unique_users": len(unique_emails(records)),
            "access_by_resource_type": count_by(records, lambda r: r.resource_type),
            "events_by_action": count_by(records, lambda r: r.action),
            "read_operations": sum(1 for r in records if action_contains(r, *READ_FRAGMENTS)),
            "write_operations": sum(1 for r in records if action_contains(r, *WRITE_FRAGMENTS)),
        }
