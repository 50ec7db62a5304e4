"""USER_ACTIVITY report: all events grouped by user."""

from auditvault.db.models.audit import AuditCategory, AuditRecord
from auditvault.db.models.report import ReportType
from auditvault.reporting.types import ReportContext

from .base import ReportGenerator, Summary, count_by, count_by_enum


class UserActivityReportGenerator(ReportGenerator):
    """Activity per user; unique users are counted by actor id, not email."""

    report_type = ReportType.USER_ACTIVITY

    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        return await self._find_in_period(ctx)

    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        return {
            "unique_users": len({record.actor_id for record in records}),
            "activity_by_user": count_by(records, lambda r: r.actor_email),
            "events_by_action": count_by(records, lambda r: r.action),
            "events_by_category": count_by_enum(records, AuditCategory, lambda r: r.category),
        }
