"""Audit record retention and archival.

Policies select records older than a cutoff, optionally narrowed by
category and a severity threshold; the engine archives and deletes them and
then cleans the search index.
"""

from .archiver import AuditArchiver
from .criteria import CriteriaVariant, RetentionCriteria, compute_cutoff
from .engine import RetentionEngine
from .policies import RetentionPolicyService
from .scheduler import RetentionScheduler
from .types import (
    CreateRetentionPolicyRequest,
    PolicyExecutionDetail,
    RetentionExecutionResult,
    RetentionPolicyResponse,
    UpdateRetentionPolicyRequest,
)

__all__ = [
    # Selection
    "CriteriaVariant",
    "RetentionCriteria",
    "compute_cutoff",
    # Services
    "AuditArchiver",
    "RetentionEngine",
    "RetentionPolicyService",
    "RetentionScheduler",
    # Types
    "CreateRetentionPolicyRequest",
    "PolicyExecutionDetail",
    "RetentionExecutionResult",
    "RetentionPolicyResponse",
    "UpdateRetentionPolicyRequest",
]
