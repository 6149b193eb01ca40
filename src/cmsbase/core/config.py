"""Configuration management for cmsbase.

Settings are read from environment variables (prefixed with ``CMSBASE_``)
and an optional ``.env`` file. They are loaded once and treated as
immutable for the lifetime of the process.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CMSBASE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "cmsbase"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3000

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/cmsbase.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_echo: bool = False

    # CORS Settings
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Collections
    collections_module: str = "cmsbase.collections"
    default_language: str = "en"

    # Media Settings
    media_path: str = "media"
    upload_path: str = "media/files"
    image_array_dir: str = "media/image_array"
    blur_radius: float = 8
    redaction_name_field: str = "Name"
    redaction_image_field: str = "Multi Image Array"

    # Auth Settings
    signup_username: str = "Admin"
    session_active_period_ms: int = 24 * 60 * 60 * 1000
    session_idle_period_ms: int = 14 * 24 * 60 * 60 * 1000
    session_id_length: int = 40
    user_id_length: int = 32

    @field_validator("cors_origins", "cors_allow_methods", "cors_allow_headers", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | list[str]) -> list[str]:
        """Accept comma-separated strings for list settings."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
