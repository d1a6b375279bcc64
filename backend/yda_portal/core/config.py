"""
YDA Portal - Configuration Module
=================================
All configuration is loaded from environment variables (prefix YDA_PORTAL_).
No secrets are hardcoded.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    # App
    app_name: str = "YDA Portal"
    app_env: str = "development"
    app_debug: bool = True
    app_secret_key: str = Field(..., min_length=32)
    app_port: int = 8000
    site_base_url: str = "https://yda-yemen.org"
    site_title: str = "Yemen Diabetes Association"

    @property
    def secret_key(self) -> str:
        return self.app_secret_key

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "yda_portal"
    postgres_user: str = "yda"
    postgres_password: str = Field(..., min_length=8)
    db_pool_size: int = 10
    db_max_overflow: int = 10
    db_echo: bool = False

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def database_url_sync(self) -> str:
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis (session revocation, sign-in throttling)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0

    @property
    def redis_url(self) -> str:
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Object storage (local buckets served under /storage)
    storage_root: str = "/var/lib/yda_portal/storage"
    storage_bucket: str = "shared"
    storage_public_base_url: str = ""

    @property
    def storage_base_url(self) -> str:
        if self.storage_public_base_url:
            return self.storage_public_base_url.rstrip("/")
        return f"{self.site_base_url.rstrip('/')}/storage"

    # Media
    media_max_upload_mb: int = 5

    # Sessions
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 14
    login_max_attempts: int = 5
    login_lockout_minutes: int = 15

    # Realtime
    realtime_queue_size: int = 100
    realtime_keepalive_seconds: int = 15

    # AI image gateway
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    ai_gateway_api_key: str = ""
    ai_image_model: str = "google/gemini-2.5-flash-image-preview"
    ai_gateway_timeout: int = 90

    # Feeds
    rss_posts_limit: int = 10
    rss_events_limit: int = 10
    rss_items_limit: int = 20

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = "YDA_PORTAL_"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
