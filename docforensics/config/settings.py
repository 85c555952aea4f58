from pydantic_settings import BaseSettings, SettingsConfigDict

_MIB = 1024 * 1024


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docforensics"
    db_username: str = "docforensics"
    db_password: str = "secret"

    chunk_store_backend: str = "memory"
    job_store_backend: str = "memory"

    chunk_ttl_seconds: int = 600
    chunk_sweep_interval_seconds: int = 60
    max_chunk_size_bytes: int = 5 * _MIB
    max_upload_size_bytes: int = 50 * _MIB
    max_file_size_bytes: int = 500 * _MIB

    pdf_engine: str = "pymupdf"

    ocr_provider: str = "example"
    ocr_openai_api_key: str = ""
    ocr_openai_model_name: str = "gpt-4o-mini"
    ocr_openai_compatible_base_url: str = ""
    ocr_timeout_seconds: int = 120
    ocr_max_output_tokens: int = 32000
    ocr_size_threshold_bytes: int = 20 * _MIB
    ocr_max_pages_per_chunk: int = 35

    worker_max_workers: int = 2
    worker_queue_size: int = 16
    extraction_range_concurrency: int = 4
    job_lease_seconds: int = 900

    api_host: str = "0.0.0.0"
    api_port: int = 8000
