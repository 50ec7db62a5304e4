"""Process wiring for auditvault.

Builds the engine, session factory, retention and reporting services from
settings, and starts/stops the background parts (report workers and the
retention scheduler) in order.

Usage:
    runtime = AuditVaultRuntime.from_settings()
    await runtime.start()
    job = await runtime.reports.request_report(request)
    ...
    await runtime.stop()
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from auditvault.compliance.retention import (
    AuditArchiver,
    RetentionEngine,
    RetentionPolicyService,
    RetentionScheduler,
)
from auditvault.config.settings import Settings, get_settings
from auditvault.core.logging import get_logger, setup_logging
from auditvault.db.config import close_db, create_engine, create_session_factory, init_db
from auditvault.reporting import CsvExportWriter, ReportOrchestrator, create_default_registry
from auditvault.search import InMemorySearchIndex, SearchIndex

logger = get_logger(__name__)


class AuditVaultRuntime:
    """Owns every long-lived component of the service."""

    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine,
        search_index: SearchIndex | None = None,
    ):
        self.settings = settings
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self.search_index = search_index or InMemorySearchIndex()

        self.archiver = AuditArchiver(self.session_factory)
        self.retention = RetentionEngine(self.session_factory, self.search_index, self.archiver)
        self.policies = RetentionPolicyService(self.session_factory)
        self.scheduler = RetentionScheduler(
            self.retention,
            interval_seconds=settings.retention_interval_seconds,
            enabled=settings.retention_enabled,
        )

        self.registry = create_default_registry(self.session_factory)
        self.reports = ReportOrchestrator(
            self.session_factory,
            self.registry,
            CsvExportWriter(settings.report_export_path, settings.report_download_url),
            worker_count=settings.report_worker_count,
            queue_size=settings.report_queue_size,
        )
        self._started = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        search_index: SearchIndex | None = None,
    ) -> "AuditVaultRuntime":
        settings = settings or get_settings()
        return cls(settings, create_engine(settings), search_index)

    async def start(self, *, create_tables: bool = False) -> None:
        """Configure logging, check the database, then start background work."""
        if self._started:
            return

        setup_logging(log_level=self.settings.log_level)
        await init_db(self.engine, create_tables=create_tables)
        await self.reports.start()
        await self.scheduler.start()
        self._started = True

        logger.info(
            "auditvault_started",
            environment=self.settings.ENVIRONMENT,
            report_workers=self.settings.report_worker_count,
            retention_enabled=self.settings.retention_enabled,
        )

    async def stop(self) -> None:
        """Stop the scheduler, drain queued reports, then close the database."""
        if not self._started:
            return

        await self.scheduler.stop()
        await self.reports.stop(drain=True)
        await close_db(self.engine)
        self._started = False
        logger.info("auditvault_stopped")
