"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "VidTube"
    app_secret_key: str
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Database
    database_url: str

    # Redis (optional, channel stats cache)
    redis_url: str | None = None

    # Tokens
    access_token_secret: str
    refresh_token_secret: str
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 10

    # Cloudinary blob storage
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""

    # Multipart uploads are spooled here before being pushed to storage
    upload_dir: str = "./public/temp"

    @field_validator("app_secret_key", "access_token_secret", "refresh_token_secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Ensure secrets are strong enough."""
        if len(v) < 32:
            raise ValueError("secrets must be at least 32 characters long")
        if v == "change-me-to-a-secure-random-string":
            raise ValueError("secrets must be changed from the default value")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Only PostgreSQL and SQLite are supported."""
        if not v.startswith(("postgresql", "sqlite")):
            raise ValueError("DATABASE_URL must be a postgresql:// or sqlite:// URL")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def storage_enabled(self) -> bool:
        """Check if Cloudinary credentials are configured."""
        return bool(
            self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret
        )

    @property
    def database_url_async(self) -> str:
        """Get async database URL (postgresql+asyncpg / sqlite+aiosqlite)."""
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite://"):
            return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]
