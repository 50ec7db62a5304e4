"""Database configuration and session management."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from auditvault.config.settings import Settings, get_settings
from auditvault.db.models.base import Base

SessionFactory = async_sessionmaker[AsyncSession]


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    """Create the async engine described by settings.

    SQLite URLs get no pool sizing since aiosqlite does not accept it; the
    test environment uses NullPool so connections never outlive a test.
    """
    settings = settings or get_settings()
    kwargs: dict = {"echo": settings.DEBUG}

    if settings.ENVIRONMENT == "test":
        kwargs["poolclass"] = NullPool
    elif not settings.DATABASE_URL.startswith("sqlite"):
        kwargs["pool_size"] = settings.DATABASE_POOL_SIZE
        kwargs["max_overflow"] = settings.DATABASE_MAX_OVERFLOW

    return create_async_engine(settings.DATABASE_URL, **kwargs)


def create_session_factory(engine: AsyncEngine) -> SessionFactory:
    """Session factory shared by retention and report services."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine, *, create_tables: bool = False) -> None:
    """Verify connectivity, optionally creating tables.

    Production schemas come from the Alembic migrations; ``create_tables``
    is for local SQLite databases.
    """
    async with engine.begin() as conn:
        if create_tables:
            await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text("SELECT 1"))


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections gracefully."""
    await engine.dispose()

