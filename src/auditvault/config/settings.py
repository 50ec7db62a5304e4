"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = "development"
    DEBUG: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./auditvault.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # Report generation
    report_export_path: str = "./exports"
    report_download_url: str = "/api/v1/audit/reports/{job_id}/download"
    """Template for the download URL stored on completed jobs."""

    report_worker_count: int = Field(default=4, ge=1)
    report_queue_size: int = Field(default=100, ge=1)

    # Retention
    retention_enabled: bool = True
    retention_interval_seconds: int = Field(default=86400, ge=1)
    """How often the scheduler runs all enabled retention policies (daily)."""


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
