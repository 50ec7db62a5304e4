"""Base class and shared aggregation helpers for report generators."""

from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any, ClassVar

from auditvault.db.config import SessionFactory
from auditvault.db.models.audit import AuditCategory, AuditRecord
from auditvault.db.models.report import ReportType
from auditvault.db.repositories.audit import AuditRecordRepository
from auditvault.reporting.types import ReportContext

Summary = dict[str, Any]


class ReportGenerator(ABC):
    """Produces the dataset and summary for one report type.

    Subclasses declare ``report_type`` and implement ``generate_data`` and
    ``summarize``. ``load_data`` memoizes the dataset on the context so the
    summary and the exported file are computed from the same records.
    """

    report_type: ClassVar[ReportType]

    total_key: ClassVar[str] = "total_events"
    """Summary key holding the dataset size."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    @abstractmethod
    async def generate_data(self, ctx: ReportContext) -> list[AuditRecord]:
        """Query the records this report covers, newest first."""

    @abstractmethod
    def summarize(self, ctx: ReportContext, records: list[AuditRecord]) -> Summary:
        """Type-specific summary fields for ``records``."""

    async def load_data(self, ctx: ReportContext) -> list[AuditRecord]:
        """Dataset for ``ctx``, queried on first use and cached after."""
        if not ctx.is_loaded:
            ctx.cache_dataset(await self.generate_data(ctx))
        return ctx.dataset or []

    async def generate_summary(self, ctx: ReportContext) -> Summary:
        records = await self.load_data(ctx)
        summary: Summary = {
            "report_type": self.report_type.value,
            "period_start": ctx.period_start.isoformat(),
            "period_end": ctx.period_end.isoformat(),
            self.total_key: len(records),
        }
        summary.update(self.summarize(ctx, records))
        return summary

    async def _find_in_period(
        self,
        ctx: ReportContext,
        category: AuditCategory | None = None,
    ) -> list[AuditRecord]:
        async with self._session_factory() as session:
            return await AuditRecordRepository(session).find_in_period(
                ctx.tenant_id,
                ctx.period_start,
                ctx.period_end,
                category=category,
            )


# =============================================================================
# Aggregation helpers
# =============================================================================


def count_by(
    records: Iterable[AuditRecord],
    key: Callable[[AuditRecord], str | None],
) -> dict[str, int]:
    """Count records per key; records whose key is None are skipped."""
    counts: Counter[str] = Counter()
    for record in records:
        value = key(record)
        if value is not None:
            counts[value] += 1
    return dict(sorted(counts.items()))


def count_by_enum(
    records: Iterable[AuditRecord],
    enum_type: type[Enum],
    key: Callable[[AuditRecord], str],
) -> dict[str, int]:
    """Count records per enum member, with every member present."""
    counts = {member.value: 0 for member in enum_type}
    for record in records:
        value = key(record)
        if value in counts:
            counts[value] += 1
    return counts


def unique_emails(records: Iterable[AuditRecord]) -> list[str]:
    return sorted({record.actor_email for record in records if record.actor_email})


def action_contains(record: AuditRecord, *fragments: str) -> bool:
    return any(fragment in record.action for fragment in fragments)
