"""Flat-file export of report datasets."""

import asyncio
import csv
import re
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol
from uuid import UUID

from auditvault.core.logging import get_logger
from auditvault.db.models.audit import AuditRecord

from .types import ExportResult

logger = get_logger(__name__)

CSV_HEADER = (
    "ID",
    "Workspace ID",
    "Actor ID",
    "Actor Email",
    "Actor Name",
    "Action",
    "Resource Type",
    "Resource ID",
    "Resource Name",
    "IP Address",
    "User Agent",
    "Session ID",
    "Severity",
    "Category",
    "Created At",
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_NAME_LENGTH = 50

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


class ExportWriter(Protocol):
    """Writes a report dataset somewhere downloadable."""

    async def export(
        self,
        records: Sequence[AuditRecord],
        job_name: str,
        job_id: UUID,
    ) -> ExportResult:
        ...


def sanitize_filename(name: str) -> str:
    """Lowercase, replace anything outside [a-zA-Z0-9_-] with '_', cap at 50 chars."""
    return _UNSAFE_CHARS.sub("_", name).lower()[:MAX_NAME_LENGTH]


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def record_to_row(record: AuditRecord) -> list[str]:
    return [
        str(record.id),
        str(record.tenant_id),
        str(record.actor_id),
        record.actor_email or "",
        record.actor_name or "",
        record.action,
        record.resource_type,
        record.resource_id,
        record.resource_name or "",
        record.ip_address or "",
        record.user_agent or "",
        record.session_id or "",
        record.severity,
        record.category,
        format_timestamp(record.created_at),
    ]


class CsvExportWriter:
    """Writes datasets as CSV files under a local export directory.

    Files are named ``<sanitized job name>_<first 8 chars of job id>_<epoch ms>.csv``
    and every field is quoted.
    """

    def __init__(
        self,
        export_path: str | Path,
        download_url: str = "/api/v1/audit/reports/{job_id}/download",
    ):
        self.export_dir = Path(export_path)
        self._download_url = download_url

    def build_filename(self, job_name: str, job_id: UUID, epoch_ms: int | None = None) -> str:
        epoch_ms = epoch_ms if epoch_ms is not None else int(time.time() * 1000)
        return f"{sanitize_filename(job_name)}_{str(job_id)[:8]}_{epoch_ms}.csv"

    def file_path(self, filename: str) -> Path:
        return self.export_dir / filename

    def exists(self, filename: str) -> bool:
        return self.file_path(filename).is_file()

    async def export(
        self,
        records: Sequence[AuditRecord],
        job_name: str,
        job_id: UUID,
    ) -> ExportResult:
        """Write ``records`` to a new CSV file.

        Returns:
            Path, download URL and size in bytes of the written file
        """
        path = self.file_path(self.build_filename(job_name, job_id))
        rows = [record_to_row(record) for record in records]

        size = await asyncio.to_thread(self._write, path, rows)

        logger.info(
            "report_exported",
            job_id=str(job_id),
            file_name=path.name,
            row_count=len(rows),
            file_size=size,
        )
        return ExportResult(
            file_path=str(path),
            file_url=self._download_url.format(job_id=job_id),
            file_size=size,
        )

    def _write(self, path: Path, rows: list[list[str]]) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle, quoting=csv.QUOTE_ALL)
            writer.writerow(CSV_HEADER)
            writer.writerows(rows)
        return path.stat().st_size
