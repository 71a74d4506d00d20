from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "invoice_ingest"
    db_username: str = "invoice_ingest"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_statement_timeout_ms: int = 30000

    job_poll_interval_seconds: int = 5
    run_timeout_seconds: int = 900
    stale_job_grace_seconds: int = 300
    finalize_pause_seconds: float = 0.5

    max_document_bytes: int = 20 * 1024 * 1024
    storage_driver: str = "local"
    storage_root: str = "/app/files"

    pdf_engine: str = "pdfplumber"

    extraction_provider: str = "openai"
    extraction_temperature: float = 0.0
    extraction_max_workers: int = 1
    extraction_render_dpi: int = 150

    extraction_openai_api_key: str = ""
    extraction_openai_model_name: str = "gpt-4o-mini"
    extraction_openai_timeout_seconds: int = 60

    extraction_openai_compatible_base_url: str = ""
    extraction_openai_compatible_api_key: str = ""
    extraction_openai_compatible_model_name: str = ""
    extraction_openai_compatible_timeout_seconds: int = 60
