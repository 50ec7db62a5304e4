"""Base repository with common persistence operations.

Repositories wrap an ``AsyncSession`` they do not own: the caller opens the
session, decides the transaction boundary and commits. Nothing here commits
unless asked to, so retention can archive and delete inside one transaction.

Usage:
    from auditvault.db.repositories.base import BaseRepository

    class RetentionPolicyRepository(BaseRepository[RetentionPolicy]):
        pass

    async with session_factory() as session:
        repo = RetentionPolicyRepository(session)
        policy = await repo.get(policy_id)
"""

from collections.abc import Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from auditvault.db.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Generic repository for UUID-keyed models.

    The model class is picked up from the generic parameter of the subclass.

    Attributes:
        model: The model class
        db: The database session
    """

    model: type[ModelType]

    def __init__(self, db: AsyncSession):
        self.db = db

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", []):
            args = getattr(base, "__args__", None)
            if args and isinstance(args[0], type) and issubclass(args[0], Base):
                cls.model = args[0]
                break

    async def get(self, pk: UUID) -> ModelType | None:
        """Get a single row by primary key, or None."""
        return await self.db.get(self.model, pk)

    async def get_many(self, pks: Sequence[UUID]) -> list[ModelType]:
        """Get rows by primary key; missing keys are skipped."""
        if not pks:
            return []
        stmt = select(self.model).where(self._pk_column().in_(pks))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count_where(self, *conditions: ColumnElement[bool]) -> int:
        """Count rows matching all conditions."""
        stmt = select(func.count()).select_from(self.model)
        if conditions:
            stmt = stmt.where(*conditions)
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def add(self, obj: ModelType, *, commit: bool = False) -> ModelType:
        """Stage a new row; flushes so defaults and constraints apply now.

        Args:
            obj: Model instance to persist
            commit: Commit and refresh instead of just flushing

        Returns:
            The persisted instance
        """
        self.db.add(obj)
        if commit:
            await self.db.commit()
            await self.db.refresh(obj)
        else:
            await self.db.flush()
        return obj

    async def add_many(self, objs: Sequence[ModelType], *, commit: bool = False) -> list[ModelType]:
        self.db.add_all(objs)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()
        return list(objs)

    async def apply(
        self, obj: ModelType, updates: dict[str, Any], *, commit: bool = False
    ) -> ModelType:
        """Set the given attributes on ``obj`` and flush.

        Unknown attribute names are ignored.
        """
        for field, value in updates.items():
            if hasattr(obj, field):
                setattr(obj, field, value)

        if commit:
            await self.db.commit()
            await self.db.refresh(obj)
        else:
            await self.db.flush()
        return obj

    async def remove(self, obj: ModelType, *, commit: bool = False) -> None:
        await self.db.delete(obj)
        if commit:
            await self.db.commit()
        else:
            await self.db.flush()

    def _pk_column(self):
        pk_cols = self.model.__mapper__.primary_key
        if not pk_cols:
            raise ValueError(f"No primary key found for {self.model.__name__}")
        return pk_cols[0]
