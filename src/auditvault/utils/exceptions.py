"""Custom exceptions for auditvault."""


class AuditVaultError(Exception):
    """Base exception for all auditvault errors."""

    pass


class ConfigurationError(AuditVaultError):
    """Error in configuration or settings."""

    pass


class StoreFailureError(AuditVaultError):
    """Transient or permanent failure from the record store or search index."""

    pass
