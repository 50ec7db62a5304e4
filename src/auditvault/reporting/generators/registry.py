"""Report generator registry.

Maps each report type to exactly one generator. The registry is built once,
at construction, and is read-only afterwards.

Usage:
    registry = create_default_registry(session_factory)
    generator = registry.get(ReportType.LOGIN_HISTORY)
"""

from collections.abc import Iterable, Iterator

from auditvault.core.exceptions import DuplicateGeneratorError, InvalidReportTypeError
from auditvault.core.logging import get_logger
from auditvault.db.config import SessionFactory
from auditvault.db.models.report import ReportType

from .access_log import AccessLogReportGenerator
from .admin_actions import AdminActionsReportGenerator
from .base import ReportGenerator
from .compliance_summary import ComplianceSummaryReportGenerator
from .data_export import DataExportReportGenerator
from .login_history import LoginHistoryReportGenerator
from .security_audit import SecurityAuditReportGenerator
from .user_activity import UserActivityReportGenerator

logger = get_logger(__name__)

DEFAULT_GENERATORS: tuple[type[ReportGenerator], ...] = (
    AccessLogReportGenerator,
    AdminActionsReportGenerator,
    ComplianceSummaryReportGenerator,
    DataExportReportGenerator,
    LoginHistoryReportGenerator,
    SecurityAuditReportGenerator,
    UserActivityReportGenerator,
)


class ReportGeneratorRegistry:
    """Immutable report type to generator mapping."""

    def __init__(self, generators: Iterable[ReportGenerator]):
        """Build the mapping.

        Args:
            generators: One generator per report type.

        Raises:
            DuplicateGeneratorError: If two generators declare the same type.
        """
        mapping: dict[ReportType, ReportGenerator] = {}
        for generator in generators:
            report_type = generator.report_type
            if report_type in mapping:
                raise DuplicateGeneratorError(report_type.value)
            mapping[report_type] = generator
        self._generators = mapping

        logger.debug(
            "report_generators_registered",
            report_types=[report_type.value for report_type in mapping],
        )

    def get(self, report_type: ReportType | str) -> ReportGenerator:
        """Generator for ``report_type``.

        Raises:
            InvalidReportTypeError: If the type is unknown or has no generator.
        """
        try:
            key = ReportType(report_type)
        except ValueError:
            raise InvalidReportTypeError(str(report_type)) from None

        generator = self._generators.get(key)
        if generator is None:
            raise InvalidReportTypeError(key.value)
        return generator

    def supports(self, report_type: ReportType | str) -> bool:
        try:
            return ReportType(report_type) in self._generators
        except ValueError:
            return False

    @property
    def report_types(self) -> list[ReportType]:
        return list(self._generators)

    def __contains__(self, report_type: object) -> bool:
        return isinstance(report_type, (ReportType, str)) and self.supports(report_type)

    def __iter__(self) -> Iterator[ReportGenerator]:
        return iter(self._generators.values())

    def __len__(self) -> int:
        return len(self._generators)


def create_default_registry(session_factory: SessionFactory) -> ReportGeneratorRegistry:
    """Registry covering every report type with the built-in generators."""
    return ReportGeneratorRegistry(cls(session_factory) for cls in DEFAULT_GENERATORS)
