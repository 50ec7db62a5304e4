"""ADMIN_ACTIONS report: configuration, authorization and role changes."""

from auditvault.db.models.audit import AuditCategory, AuditRecord
from auditvault.db.models.report import ReportType
from auditvault.reporting.types import ReportContext

from .base import ReportGenerator, Summary, action_contains, count_by, unique_emails

ADMIN_CATEGORIES = frozenset({AuditCategory.CONFIGURATION.value, AuditCategory.AUTHORIZATION.value})


def is_admin_action(record: AuditRecord) -> bool:
    return (
        record.category in ADMIN_CATEGORIES
        or record.action.startswith("ADMIN_")
        or action_contains(record, "ROLE", "PERMISSION")
    )


class AdminActionsReportGenerator(ReportGenerator):
    """Administrative activity grouped by admin."""

    report_type = ReportType.ADMIN_ACTIONS

    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        records = await self._find_in_period(ctx)
        return [record for record in records if is_admin_action(record)]

    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        admins = unique_emails(records)
        return {
            "unique_admins": len(admins),
            "admin_emails": admins,
            "actions_by_admin": count_by(records, lambda r: r.actor_email),
            "events_by_action": count_by(records, lambda r: r.action),
            "configuration_changes": sum(
                1 for r in records if r.category == AuditCategory.CONFIGURATION.value
            ),
        }
