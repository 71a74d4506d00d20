import pytest
from pydantic import ValidationError

from invoice_ingest.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_job_poll_interval(self) -> None:
        s = Settings()
        assert s.job_poll_interval_seconds == 5

    def test_default_run_timeout(self) -> None:
        s = Settings()
        assert s.run_timeout_seconds == 900
        assert s.stale_job_grace_seconds == 300

    def test_default_finalize_pause(self) -> None:
        s = Settings()
        assert s.finalize_pause_seconds == 0.5

    def test_default_pdf_engine(self) -> None:
        s = Settings()
        assert s.pdf_engine == "pdfplumber"

    def test_default_extraction_provider(self) -> None:
        s = Settings()
        assert s.extraction_provider == "openai"
        assert s.extraction_max_workers == 1

    def test_default_storage(self) -> None:
        s = Settings()
        assert s.storage_driver == "local"
        assert s.max_document_bytes == 20 * 1024 * 1024


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_run_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RUN_TIMEOUT_SECONDS", "60")
        s = Settings()
        assert s.run_timeout_seconds == 60

    def test_loads_extraction_workers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EXTRACTION_MAX_WORKERS", "4")
        s = Settings()
        assert s.extraction_max_workers == 4


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_finalize_pause_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FINALIZE_PAUSE_SECONDS", "soon")
        with pytest.raises(ValidationError):
            Settings()
