"""LOGIN_HISTORY report: authentication events."""

from auditvault.db.models.audit import AuditCategory, AuditRecord
from auditvault.db.models.report import ReportType
from auditvault.reporting.types import ReportContext

from .base import ReportGenerator, Summary, count_by

LOGIN_SUCCESS = "LOGIN_SUCCESS"
LOGIN_FAILED = "LOGIN_FAILED"
LOGOUT = "LOGOUT"


class LoginHistoryReportGenerator(ReportGenerator):
    """Logins, failed logins and logouts, per user email."""

    report_type = ReportType.LOGIN_HISTORY

    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        return await self._find_in_period(ctx, category=AuditCategory.AUTHENTICATION)

    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        by_action = count_by(records, lambda r: r.action)
        return {
            "successful_logins": by_action.get(LOGIN_SUCCESS, 0),
            "failed_logins": by_action.get(LOGIN_FAILED, 0),
            "logouts": by_action.get(LOGOUT, 0),
            # Every authentication event counts, not just successful logins
            "logins_by_user": count_by(records, lambda r: r.actor_email),
        }
