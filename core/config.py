"""
Application configuration management.

Uses pydantic-settings for type-safe environment variable parsing.
All configuration is centralized here to support dependency injection
and avoid scattering os.getenv() calls throughout the codebase.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation and type coercion.

    Values are loaded from environment variables or .env file.
    All fields have sensible defaults for local development.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Backend Selection
    # Options: "mongodb", "memory"
    storage_backend: Literal["mongodb", "memory"] = "mongodb"

    # MongoDB Configuration (default backend)
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "lost_and_found"
    mongodb_timeout_ms: int = 5000

    # Use the in-memory store when MongoDB cannot be reached at startup
    storage_fallback_to_memory: bool = True
    seed_sample_data: bool = True

    # Authentication
    jwt_secret: str = "default_jwt_secret_for_development"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 30
    bcrypt_rounds: int = 10

    # Image uploads
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 5000
    debug: bool = True
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings singleton.

    Use this function to get settings instance throughout the application.
    The @lru_cache ensures we only parse environment once.
    """
    return Settings()


# Convenience export for direct import
settings = get_settings()
