"""Retention policy administration."""

from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from auditvault.core.exceptions import DuplicatePolicyNameError, PolicyNotFoundError
from auditvault.core.logging import get_logger
from auditvault.db.config import SessionFactory
from auditvault.db.models.retention import RetentionPolicy
from auditvault.db.repositories.retention import RetentionPolicyRepository

from .types import (
    CreateRetentionPolicyRequest,
    RetentionPolicyResponse,
    UpdateRetentionPolicyRequest,
)

logger = get_logger(__name__)

# Columns that cannot be cleared by an update
_REQUIRED_FIELDS = frozenset({"name", "retention_days", "enabled", "archive_before_delete"})


class RetentionPolicyService:
    """Create, read, update and delete retention policies for a tenant.

    All errors surface synchronously to the caller.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def create(self, request: CreateRetentionPolicyRequest) -> RetentionPolicyResponse:
        """Create a policy.

        Raises:
            DuplicatePolicyNameError: If the tenant already has a policy with this name
        """
        async with self._session_factory() as session:
            repo = RetentionPolicyRepository(session)
            if await repo.exists_by_tenant_and_name(request.tenant_id, request.name):
                raise DuplicatePolicyNameError(request.tenant_id, request.name)

            policy = RetentionPolicy(
                tenant_id=request.tenant_id,
                name=request.name,
                description=request.description,
                retention_days=request.retention_days,
                category=request.category.value if request.category else None,
                min_severity=request.min_severity.value if request.min_severity else None,
                enabled=request.enabled,
                archive_before_delete=request.archive_before_delete,
            )
            try:
                await repo.add(policy, commit=True)
            except IntegrityError as e:
                # Lost a race with a concurrent create of the same name
                await session.rollback()
                raise DuplicatePolicyNameError(request.tenant_id, request.name) from e

        logger.info(
            "retention_policy_created",
            policy_id=str(policy.id),
            tenant_id=str(policy.tenant_id),
            name=policy.name,
            retention_days=policy.retention_days,
        )
        return RetentionPolicyResponse.model_validate(policy)

    async def get(self, tenant_id: UUID, policy_id: UUID) -> RetentionPolicyResponse:
        """Raises PolicyNotFoundError if absent or owned by another tenant."""
        async with self._session_factory() as session:
            policy = await RetentionPolicyRepository(session).get_for_tenant(tenant_id, policy_id)
        if policy is None:
            raise PolicyNotFoundError(policy_id)
        return RetentionPolicyResponse.model_validate(policy)

    async def list(self, tenant_id: UUID) -> list[RetentionPolicyResponse]:
        async with self._session_factory() as session:
            policies = await RetentionPolicyRepository(session).list_by_tenant(tenant_id)
        return [RetentionPolicyResponse.model_validate(policy) for policy in policies]

    async def update(
        self,
        tenant_id: UUID,
        policy_id: UUID,
        request: UpdateRetentionPolicyRequest,
    ) -> RetentionPolicyResponse:
        """Apply the fields that were set on the request.

        ``description``, ``category`` and ``min_severity`` may be cleared by
        sending an explicit null; required fields ignore nulls.

        Raises:
            PolicyNotFoundError: If absent or owned by another tenant
            DuplicatePolicyNameError: If renaming onto another policy's name
        """
        updates = _update_values(request)

        async with self._session_factory() as session:
            repo = RetentionPolicyRepository(session)
            policy = await repo.get_for_tenant(tenant_id, policy_id)
            if policy is None:
                raise PolicyNotFoundError(policy_id)

            new_name = updates.get("name")
            if new_name and new_name != policy.name:
                if await repo.exists_by_tenant_and_name(tenant_id, new_name, exclude_id=policy_id):
                    raise DuplicatePolicyNameError(tenant_id, new_name)

            await repo.apply(policy, updates, commit=True)

        logger.info(
            "retention_policy_updated",
            policy_id=str(policy_id),
            fields=sorted(updates),
        )
        return RetentionPolicyResponse.model_validate(policy)

    async def delete(self, tenant_id: UUID, policy_id: UUID) -> None:
        """Raises PolicyNotFoundError if absent or owned by another tenant."""
        async with self._session_factory() as session:
            repo = RetentionPolicyRepository(session)
            policy = await repo.get_for_tenant(tenant_id, policy_id)
            if policy is None:
                raise PolicyNotFoundError(policy_id)
            await repo.remove(policy, commit=True)

        logger.info("retention_policy_deleted", policy_id=str(policy_id))


def _update_values(request: UpdateRetentionPolicyRequest) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for field, value in request.model_dump(exclude_unset=True).items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        values[field] = value.value if hasattr(value, "value") else value
    return values
