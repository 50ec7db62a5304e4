"""Utility modules for auditvault."""

from auditvault.utils.exceptions import (
    AuditVaultError,
    ConfigurationError,
    StoreFailureError,
)

__all__ = [
    "AuditVaultError",
    "ConfigurationError",
    "StoreFailureError",
]
