"""Compliance report generation pipeline.

Report requests become jobs that a bounded worker pool drives through
PENDING -> PROCESSING -> COMPLETED | FAILED. Each report type is served by
one generator; completed jobs carry a summary and a CSV export.
"""

# types must load before generators, which import it
from .types import (
    CreateReportRequest,
    ExportReference,
    ExportResult,
    Page,
    ReportContext,
    ReportJobResponse,
)

from .export import CsvExportWriter, ExportWriter, sanitize_filename
from .generators import ReportGenerator, ReportGeneratorRegistry, create_default_registry
from .orchestrator import ReportOrchestrator
from .workers import ReportWorkerPool, WorkerPoolClosedError

__all__ = [
    # Types
    "CreateReportRequest",
    "ExportReference",
    "ExportResult",
    "Page",
    "ReportContext",
    "ReportJobResponse",
    # Export
    "CsvExportWriter",
    "ExportWriter",
    "sanitize_filename",
    # Generators
    "ReportGenerator",
    "ReportGeneratorRegistry",
    "create_default_registry",
    # Orchestration
    "ReportOrchestrator",
    "ReportWorkerPool",
    "WorkerPoolClosedError",
]
