"""Pytest fixtures for auditvault tests."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any
from uuid import UUID

import pytest
import pytest_asyncio
import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from uuid_utils.compat import uuid7

from auditvault.config.settings import Settings
from auditvault.db.config import SessionFactory, create_session_factory
from auditvault.db.models import (
    AuditCategory,
    AuditRecord,
    AuditSeverity,
    Base,
    RetentionPolicy,
)

RecordFactory = Callable[..., Awaitable[AuditRecord]]
PolicyFactory = Callable[..., Awaitable[RetentionPolicy]]


# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    Tests that call setup_logging() must not leak configuration.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a per-test SQLite file and export directory."""
    return Settings(
        ENVIRONMENT="test",
        DEBUG=False,
        log_level="DEBUG",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'auditvault.db'}",
        report_export_path=str(tmp_path / "exports"),
        report_worker_count=2,
        report_queue_size=10,
        retention_enabled=False,
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite database file with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> SessionFactory:
    return create_session_factory(engine)


@pytest.fixture
def tenant_id() -> UUID:
    return uuid7()


@pytest.fixture
def now() -> datetime:
    return datetime.now(UTC)


@pytest.fixture
def make_record(session_factory: SessionFactory, tenant_id: UUID, now: datetime) -> RecordFactory:
    """Persist an audit record; ``age_days`` backdates created_at."""

    async def _make(
        *,
        age_days: float = 0,
        created_at: datetime | None = None,
        category: AuditCategory = AuditCategory.SYSTEM,
        severity: AuditSeverity = AuditSeverity.LOW,
        action: str = "RECORD_VIEWED",
        tenant: UUID | None = None,
        actor_id: UUID | None = None,
        actor_email: str | None = "user@example.com",
        **overrides: Any,
    ) -> AuditRecord:
        record = AuditRecord(
            id=uuid7(),
            tenant_id=tenant or tenant_id,
            actor_id=actor_id or uuid7(),
            actor_email=actor_email,
            actor_name=overrides.pop("actor_name", "Test User"),
            action=action,
            resource_type=overrides.pop("resource_type", "document"),
            resource_id=overrides.pop("resource_id", "doc-1"),
            resource_name=overrides.pop("resource_name", None),
            severity=severity.value,
            category=category.value,
            created_at=created_at or (now - timedelta(days=age_days)),
            **overrides,
        )
        async with session_factory() as session:
            session.add(record)
            await session.commit()
        return record

    return _make


@pytest.fixture
def make_policy(session_factory: SessionFactory, tenant_id: UUID) -> PolicyFactory:
    """Persist a retention policy with sensible defaults."""

    async def _make(
        *,
        name: str | None = None,
        retention_days: int = 90,
        category: AuditCategory | None = None,
        min_severity: AuditSeverity | None = None,
        enabled: bool = True,
        archive_before_delete: bool = False,
        tenant: UUID | None = None,
    ) -> RetentionPolicy:
        policy = RetentionPolicy(
            tenant_id=tenant or tenant_id,
            name=name or f"policy-{uuid7().hex[-8:]}",
            retention_days=retention_days,
            category=category.value if category else None,
            min_severity=min_severity.value if min_severity else None,
            enabled=enabled,
            archive_before_delete=archive_before_delete,
        )
        async with session_factory() as session:
            session.add(policy)
            await session.commit()
        return policy

    return _make
