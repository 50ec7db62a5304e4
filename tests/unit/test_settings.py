"""Unit tests for application settings."""

import pytest
from pydantic import ValidationError

from auditvault.config.settings import Settings, get_settings


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.ENVIRONMENT == "development"
        assert settings.DATABASE_URL.startswith("sqlite+aiosqlite://")
        assert settings.report_worker_count == 4
        assert settings.report_queue_size == 100
        assert settings.retention_enabled is True
        assert settings.retention_interval_seconds == 86400
        assert "{job_id}" in settings.report_download_url

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPORT_WORKER_COUNT", "8")
        monkeypatch.setenv("RETENTION_ENABLED", "false")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.report_worker_count == 8
        assert settings.retention_enabled is False
        assert settings.ENVIRONMENT == "production"

    @pytest.mark.parametrize(
        "field",
        ["report_worker_count", "report_queue_size", "retention_interval_seconds"],
    )
    def test_positive_values_required(self, field: str) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})

    def test_invalid_environment_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ENVIRONMENT="qa")

    def test_get_settings_is_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
