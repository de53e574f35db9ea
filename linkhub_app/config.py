from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True

    # Application
    app_name: str = "LinkHub"
    app_version: str = "1.0.0"
    base_url: str = "http://127.0.0.1:8000"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Key-value store settings
    store_backend: str = "redis"  # Options: "redis", "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: int = 2

    # Sessions
    session_ttl_seconds: int = 60 * 60 * 24 * 7  # 7 days
    session_cookie_name: str = "session"

    # Admin bootstrap (placeholders, override via environment in production!)
    admin_username: str = "admin"
    admin_password: str = "admin123"
    admin_email: str = "admin@linkhub.com"

    # Blob storage settings
    blob_backend: str = "local"  # Options: "local", "s3", "memory"
    blob_local_dir: str = "media"
    blob_public_base: Optional[str] = None  # Public URL prefix for stored blobs
    s3_bucket: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    s3_region: str = "auto"
    s3_access_key_id: Optional[str] = None
    s3_secret_access_key: Optional[str] = None
    max_image_bytes: int = 4 * 1024 * 1024

    # Analytics
    analytics_default_days: int = 30

    # Development helpers
    allow_reset_db: bool = True

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Create settings instance
settings = Settings()
