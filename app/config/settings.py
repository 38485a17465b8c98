from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "postgres"
    db_username: str = "postgres"
    db_password: str = "secret"
    db_sslmode: str = "prefer"

    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: str = ""

    storage_backend: str = "supabase"
    storage_bucket: str = "referrals"
    storage_cache_control: str = "3600"
    storage_files_root: str = "/app/files"
    storage_chunk_size_bytes: int = 64 * 1024

    http_timeout_seconds: int = 30
    webhook_url: str = ""

    max_upload_size_bytes: int = 10 * 1024 * 1024
    success_display_delay_seconds: float = 0.5
