"""Report generators, one per report type."""

from .access_log import AccessLogReportGenerator
from .admin_actions import AdminActionsReportGenerator
from .base import ReportGenerator, Summary
from .compliance_summary import ComplianceSummaryReportGenerator, compliance_score
from .data_export import DataExportReportGenerator
from .login_history import LoginHistoryReportGenerator
from .registry import DEFAULT_GENERATORS, ReportGeneratorRegistry, create_default_registry
from .security_audit import SecurityAuditReportGenerator
from .user_activity import UserActivityReportGenerator

__all__ = [
    "ReportGenerator",
    "Summary",
    "AccessLogReportGenerator",
    "AdminActionsReportGenerator",
    "ComplianceSummaryReportGenerator",
    "DataExportReportGenerator",
    "LoginHistoryReportGenerator",
    "SecurityAuditReportGenerator",
    "UserActivityReportGenerator",
    "compliance_score",
    "DEFAULT_GENERATORS",
    "ReportGeneratorRegistry",
    "create_default_registry",
]
