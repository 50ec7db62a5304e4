"""Core exceptions for retention administration and report generation."""

from uuid import UUID

from auditvault.utils.exceptions import AuditVaultError, ConfigurationError


class NotFoundError(AuditVaultError):
    """Raised when a requested resource does not exist.

    Attributes:
        resource: Human-readable resource kind (e.g., "Retention policy")
        resource_id: The identifier that was looked up
    """

    def __init__(self, resource: str, resource_id: UUID | str):
        super().__init__(f"{resource} not found")
        self.resource = resource
        self.resource_id = resource_id

    def __str__(self) -> str:
        return f"{self.args[0]}: {self.resource_id}"


class PolicyNotFoundError(NotFoundError):
    """Raised when a retention policy does not exist."""

    def __init__(self, policy_id: UUID | str):
        super().__init__("Retention policy", policy_id)


class ReportNotFoundError(NotFoundError):
    """Raised when a compliance report job does not exist."""

    def __init__(self, job_id: UUID | str):
        super().__init__("Report", job_id)


class DuplicatePolicyNameError(AuditVaultError):
    """Raised when a tenant already has a retention policy with the same name.

    Attributes:
        tenant_id: The tenant that owns the existing policy
        name: The conflicting policy name
    """

    def __init__(self, tenant_id: UUID, name: str):
        super().__init__("Retention policy with this name already exists")
        self.tenant_id = tenant_id
        self.name = name

    def __str__(self) -> str:
        return f"DuplicatePolicyNameError: {self.args[0]} (tenant={self.tenant_id}, name={self.name})"


class InvalidReportTypeError(ConfigurationError):
    """Raised when no generator is registered for a report type.

    Attributes:
        report_type: The report type that could not be resolved
    """

    def __init__(self, report_type: str):
        super().__init__(f"No generator found for report type: {report_type}")
        self.report_type = report_type


class DuplicateGeneratorError(ConfigurationError):
    """Raised when two generators are registered for the same report type."""

    def __init__(self, report_type: str):
        super().__init__(f"Multiple generators registered for report type: {report_type}")
        self.report_type = report_type


class GenerationFailureError(AuditVaultError):
    """Raised when report dataset, summary or export production fails."""

    pass


class InvalidStatusTransitionError(AuditVaultError):
    """Raised when a report job would move backwards or out of a terminal state.

    Attributes:
        current: Status the job is in
        target: Status that was requested
    """

    def __init__(self, current: str, target: str):
        super().__init__(f"Invalid report status transition: {current} -> {target}")
        self.current = current
        self.target = target


class ReportNotReadyError(AuditVaultError):
    """Raised when downloading a report that has no export yet.

    Attributes:
        job_id: The report job
        status: Current status of the job
    """

    def __init__(self, job_id: UUID, status: str):
        super().__init__(f"Report {job_id} is not ready for download (status={status})")
        self.job_id = job_id
        self.status = status
