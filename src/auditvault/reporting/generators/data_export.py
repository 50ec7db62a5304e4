"""DATA_EXPORT report: exports, downloads and bulk operations."""

from auditvault.db.models.audit import AuditRecord
from auditvault.db.models.report import ReportType
from auditvault.reporting.types import ReportContext

from .base import ReportGenerator, Summary, action_contains, count_by, unique_emails

EXPORT_FRAGMENTS = ("EXPORT", "DOWNLOAD", "BULK_")


class DataExportReportGenerator(ReportGenerator):
    """Data leaving the platform, grouped by exporter."""

    report_type = ReportType.DATA_EXPORT
    total_key = "total_exports"

    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        records = await self._find_in_period(ctx)
        return [record for record in records if action_contains(record, *EXPORT_FRAGMENTS)]

    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        exporters = unique_emails(records)
        return {
            "unique_exporters": len(exporters),
            "exporter_emails": exporters,
            "exports_by_user": count_by(records, lambda r: r.actor_email),
            "exports_by_resource_type": count_by(records, lambda r: r.resource_type),
        }
