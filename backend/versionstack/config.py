"""Configuration settings for VersionStack."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "VersionStack"
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    timezone: str = "UTC"  # Timezone for timestamps (e.g., "America/New_York", "Europe/London")

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/registry.db"

    # Content store
    files_dir: str = "./data/files"  # Root of <appKey>/<versionName>/<fileName>
    tmp_upload_dir: str = "./data/tmp_uploads"  # Multipart uploads are spooled here first
    upload_chunk_size: int = 1024 * 1024  # 1 MiB read/write chunks for spooling and hashing

    # Session tokens
    jwt_secret: str = "super-secret-key-change-this"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 12

    # Bootstrap admin key (out-of-band secret, no database row)
    admin_api_key: str | None = None

    # Audit log pagination
    audit_default_limit: int = 100
    audit_max_limit: int = 500

    # CORS settings
    cors_origins: str = '["http://localhost:5173"]'


settings = Settings()
