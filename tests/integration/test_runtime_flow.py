"""End-to-end retention and reporting through the assembled runtime."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from uuid_utils.compat import uuid7

from auditvault.compliance.retention import CreateRetentionPolicyRequest
from auditvault.db.models import AuditCategory, AuditRecord, AuditSeverity, ReportStatus, ReportType
from auditvault.reporting import CreateReportRequest
from auditvault.runtime import AuditVaultRuntime
from auditvault.search import InMemorySearchIndex


def _record(tenant_id, *, age_days, category, severity=AuditSeverity.LOW, action="EVENT"):
    return AuditRecord(
        id=uuid7(),
        tenant_id=tenant_id,
        actor_id=uuid7(),
        actor_email="user@example.com",
        action=action,
        resource_type="document",
        resource_id="doc-1",
        category=category.value,
        severity=severity.value,
        created_at=datetime.now(UTC) - timedelta(days=age_days),
    )


@pytest.mark.asyncio
async def test_retention_then_report(test_settings) -> None:
    """Expired records are archived and purged, then a report sees only survivors."""
    search_index = InMemorySearchIndex()
    runtime = AuditVaultRuntime.from_settings(test_settings, search_index=search_index)
    await runtime.start(create_tables=True)
    try:
        tenant_id = uuid7()
        records = [
            _record(tenant_id, age_days=200, category=AuditCategory.SECURITY),
            _record(tenant_id, age_days=200, category=AuditCategory.SECURITY),
            _record(
                tenant_id,
                age_days=200,
                category=AuditCategory.SECURITY,
                severity=AuditSeverity.CRITICAL,
            ),
            _record(tenant_id, age_days=2, category=AuditCategory.SECURITY),
        ]
        async with runtime.session_factory() as session:
            session.add_all(records)
            await session.commit()
        await search_index.index(records)

        await runtime.policies.create(
            CreateRetentionPolicyRequest(
                tenant_id=tenant_id,
                name="security-noise",
                retention_days=180,
                category=AuditCategory.SECURITY,
                min_severity=AuditSeverity.HIGH,
                archive_before_delete=True,
            )
        )

        result = await runtime.scheduler.run_once()

        assert result.total_policies_executed == 1
        assert result.failed_policies == 0
        assert result.total_deleted == 2
        assert result.total_archived == 2
        assert len(search_index) == 2
        assert runtime.scheduler.last_result is result

        job = await runtime.reports.request_report(
            CreateReportRequest(
                tenant_id=tenant_id,
                name="Security review",
                report_type=ReportType.SECURITY_AUDIT,
                period_start=datetime.now(UTC) - timedelta(days=365),
                period_end=datetime.now(UTC) + timedelta(minutes=1),
            )
        )
        await runtime.reports.workers.join()

        done = await runtime.reports.get_job(job.id, tenant_id)
        assert done.status == ReportStatus.COMPLETED, done.error_message
        assert done.summary["total_events"] == 2
        assert done.summary["critical_events"] == 1

        reference = await runtime.reports.resolve_download(job.id, tenant_id)
        path = Path(reference.file_path)
        assert path.parent == Path(test_settings.report_export_path)
        # Header plus one line per surviving record
        assert len(path.read_text(encoding="utf-8").splitlines()) == 3
    finally:
        await runtime.stop()


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent(test_settings) -> None:
    runtime = AuditVaultRuntime.from_settings(test_settings)

    await runtime.start(create_tables=True)
    await runtime.start()
    assert runtime.reports.workers.is_running
    assert not runtime.scheduler.is_running

    await runtime.stop()
    await runtime.stop()
    assert not runtime.reports.workers.is_running
