"""Repository for retention policies."""

from uuid import UUID

from sqlalchemy import select

from auditvault.db.models.retention import RetentionPolicy

from .base import BaseRepository


class RetentionPolicyRepository(BaseRepository[RetentionPolicy]):
    """Tenant-scoped access to retention policies."""

    async def get_for_tenant(self, tenant_id: UUID, policy_id: UUID) -> RetentionPolicy | None:
        """Fetch a policy only if it belongs to the tenant."""
        policy = await self.get(policy_id)
        if policy is None or policy.tenant_id != tenant_id:
            return None
        return policy

    async def exists_by_tenant_and_name(
        self,
        tenant_id: UUID,
        name: str,
        *,
        exclude_id: UUID | None = None,
    ) -> bool:
        conditions = [RetentionPolicy.tenant_id == tenant_id, RetentionPolicy.name == name]
        if exclude_id is not None:
            conditions.append(RetentionPolicy.id != exclude_id)
        return await self.count_where(*conditions) > 0

    async def list_by_tenant(self, tenant_id: UUID) -> list[RetentionPolicy]:
        stmt = (
            select(RetentionPolicy)
            .where(RetentionPolicy.tenant_id == tenant_id)
            .order_by(RetentionPolicy.name)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_enabled(self) -> list[RetentionPolicy]:
        """All enabled policies across tenants, in a stable order."""
        stmt = (
            select(RetentionPolicy)
            .where(RetentionPolicy.enabled.is_(True))
            .order_by(RetentionPolicy.tenant_id, RetentionPolicy.name)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
