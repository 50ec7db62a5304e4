"""Tests for retention record selection criteria."""

from datetime import UTC, datetime, timedelta

import pytest
from uuid_utils.compat import uuid7

from auditvault.compliance.retention.criteria import (
    EARLIEST_CUTOFF,
    CriteriaVariant,
    RetentionCriteria,
    compute_cutoff,
)
from auditvault.db.models import AuditCategory, AuditRecord, AuditSeverity, RetentionPolicy
from auditvault.db.repositories import AuditRecordRepository

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


def _record(tenant_id, *, age_days=100, category=AuditCategory.SYSTEM, severity=AuditSeverity.LOW):
    return AuditRecord(
        id=uuid7(),
        tenant_id=tenant_id,
        actor_id=uuid7(),
        action="RECORD_VIEWED",
        resource_type="document",
        resource_id="doc-1",
        category=category.value,
        severity=severity.value,
        created_at=NOW - timedelta(days=age_days),
    )


class TestAuditSeverity:
    """Tests for severity ordering."""

    def test_rank_order(self) -> None:
        ranks = [level.rank for level in AuditSeverity]
        assert ranks == [0, 1, 2, 3]

    def test_levels_below_is_strict(self) -> None:
        assert AuditSeverity.HIGH.levels_below() == [AuditSeverity.LOW, AuditSeverity.MEDIUM]
        assert AuditSeverity.LOW.levels_below() == []
        assert AuditSeverity.HIGH not in AuditSeverity.HIGH.levels_below()


class TestComputeCutoff:
    def test_cutoff_subtracts_days(self) -> None:
        assert compute_cutoff(90, NOW) == NOW - timedelta(days=90)

    def test_cutoff_defaults_to_current_time(self) -> None:
        before = datetime.now(UTC)
        cutoff = compute_cutoff(1)
        after = datetime.now(UTC)
        assert before - timedelta(days=1) <= cutoff <= after - timedelta(days=1)

    @pytest.mark.parametrize("days", [1_000_000, 999_999_999, 10**12])
    def test_window_past_calendar_start_clamps(self, days) -> None:
        assert compute_cutoff(days, NOW) == EARLIEST_CUTOFF

    def test_clamped_cutoff_matches_nothing(self) -> None:
        tenant_id = uuid7()
        criteria = RetentionCriteria(tenant_id=tenant_id, cutoff=compute_cutoff(1_000_000, NOW))
        assert not criteria.matches(_record(tenant_id, age_days=365 * 500))


class TestCriteriaFromPolicy:
    """Tests for building criteria from a policy."""

    @pytest.mark.parametrize(
        ("category", "min_severity", "variant"),
        [
            (AuditCategory.SECURITY, AuditSeverity.HIGH, CriteriaVariant.CATEGORY_AND_SEVERITY),
            (AuditCategory.SECURITY, None, CriteriaVariant.CATEGORY),
            (None, AuditSeverity.HIGH, CriteriaVariant.SEVERITY),
            (None, None, CriteriaVariant.AGE_ONLY),
        ],
    )
    def test_variant_follows_filters(self, category, min_severity, variant) -> None:
        policy = RetentionPolicy(
            tenant_id=uuid7(),
            name="p",
            retention_days=30,
            category=category.value if category else None,
            min_severity=min_severity.value if min_severity else None,
        )
        criteria = RetentionCriteria.from_policy(policy, NOW)

        assert criteria.variant == variant
        assert criteria.tenant_id == policy.tenant_id
        assert criteria.cutoff == NOW - timedelta(days=30)
        assert criteria.category == category
        assert criteria.min_severity == min_severity

    def test_describe_is_loggable(self) -> None:
        criteria = RetentionCriteria(
            tenant_id=uuid7(),
            cutoff=NOW,
            category=AuditCategory.SECURITY,
            min_severity=AuditSeverity.HIGH,
        )
        described = criteria.describe()
        assert described["variant"] == "category_and_severity"
        assert described["category"] == "SECURITY"
        assert described["min_severity"] == "HIGH"


class TestCriteriaMatches:
    """In-memory predicate semantics."""

    def test_age_only_selects_older_records(self) -> None:
        tenant = uuid7()
        criteria = RetentionCriteria(tenant_id=tenant, cutoff=NOW - timedelta(days=90))

        assert criteria.matches(_record(tenant, age_days=100))
        assert not criteria.matches(_record(tenant, age_days=10))

    def test_record_at_cutoff_is_not_selected(self) -> None:
        tenant = uuid7()
        criteria = RetentionCriteria(tenant_id=tenant, cutoff=NOW - timedelta(days=90))
        assert not criteria.matches(_record(tenant, age_days=90))

    def test_other_tenant_never_matches(self) -> None:
        criteria = RetentionCriteria(tenant_id=uuid7(), cutoff=NOW)
        assert not criteria.matches(_record(uuid7(), age_days=365))

    def test_global_criteria_ignores_tenant(self) -> None:
        criteria = RetentionCriteria(tenant_id=None, cutoff=NOW)
        assert criteria.matches(_record(uuid7(), age_days=1))

    def test_severity_threshold_is_strict(self) -> None:
        tenant = uuid7()
        criteria = RetentionCriteria(
            tenant_id=tenant, cutoff=NOW, min_severity=AuditSeverity.HIGH
        )

        assert criteria.matches(_record(tenant, severity=AuditSeverity.LOW))
        assert criteria.matches(_record(tenant, severity=AuditSeverity.MEDIUM))
        assert not criteria.matches(_record(tenant, severity=AuditSeverity.HIGH))
        assert not criteria.matches(_record(tenant, severity=AuditSeverity.CRITICAL))

    def test_low_threshold_selects_nothing(self) -> None:
        tenant = uuid7()
        criteria = RetentionCriteria(tenant_id=tenant, cutoff=NOW, min_severity=AuditSeverity.LOW)
        assert not criteria.matches(_record(tenant, severity=AuditSeverity.LOW))

    def test_category_and_severity_combined(self) -> None:
        tenant = uuid7()
        criteria = RetentionCriteria(
            tenant_id=tenant,
            cutoff=NOW,
            category=AuditCategory.SECURITY,
            min_severity=AuditSeverity.HIGH,
        )

        assert criteria.matches(
            _record(tenant, category=AuditCategory.SECURITY, severity=AuditSeverity.MEDIUM)
        )
        assert not criteria.matches(
            _record(tenant, category=AuditCategory.SYSTEM, severity=AuditSeverity.MEDIUM)
        )
        assert not criteria.matches(
            _record(tenant, category=AuditCategory.SECURITY, severity=AuditSeverity.HIGH)
        )

    def test_naive_created_at_treated_as_utc(self) -> None:
        tenant = uuid7()
        record = _record(tenant, age_days=100)
        record.created_at = record.created_at.replace(tzinfo=None)
        criteria = RetentionCriteria(tenant_id=tenant, cutoff=NOW - timedelta(days=90))
        assert criteria.matches(record)


class TestCriteriaQueries:
    """The SQL predicate agrees with the in-memory one."""

    @pytest.mark.asyncio
    async def test_sql_selection_matches_in_memory(
        self, session_factory, make_record, tenant_id, now
    ) -> None:
        other_tenant = uuid7()
        records = [
            await make_record(age_days=100, category=AuditCategory.SECURITY),
            await make_record(
                age_days=100, category=AuditCategory.SECURITY, severity=AuditSeverity.HIGH
            ),
            await make_record(age_days=100, category=AuditCategory.SYSTEM),
            await make_record(age_days=5, category=AuditCategory.SECURITY),
            await make_record(age_days=100, category=AuditCategory.SECURITY, tenant=other_tenant),
        ]

        for category in (None, AuditCategory.SECURITY):
            for min_severity in (None, AuditSeverity.HIGH):
                criteria = RetentionCriteria(
                    tenant_id=tenant_id,
                    cutoff=now - timedelta(days=90),
                    category=category,
                    min_severity=min_severity,
                )
                async with session_factory() as session:
                    ids = set(await AuditRecordRepository(session).find_ids_matching(criteria))

                expected = {record.id for record in records if criteria.matches(record)}
                assert ids == expected, criteria.variant

    @pytest.mark.asyncio
    async def test_low_threshold_query_selects_nothing(
        self, session_factory, make_record, tenant_id, now
    ) -> None:
        await make_record(age_days=100, severity=AuditSeverity.LOW)
        criteria = RetentionCriteria(
            tenant_id=tenant_id, cutoff=now, min_severity=AuditSeverity.LOW
        )
        async with session_factory() as session:
            assert await AuditRecordRepository(session).count_matching(criteria) == 0
