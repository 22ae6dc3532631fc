"""Application configuration settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Destination store configuration."""

    type: str = Field(default="local", description="Store backend (local, database)")
    database_url: str = Field(default="sqlite:///./data/modsync.db")
    base_dir: Optional[str] = Field(default=None, description="Root directory of the local store")

    model_config = SettingsConfigDict(env_prefix="STORE_")


class SyncSettings(BaseSettings):
    """Resource sync behaviour."""

    concurrent_mappings: bool = Field(default=False)
    fail_fast: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="SYNC_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO")
    format: str = Field(default="console")
    file_path: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(env_prefix="LOG_")


class AppSettings(BaseSettings):
    """Main application settings."""

    name: str = Field(default="modsync")
    version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Directory receiving unconditional copies; also the default local store root
    project_location: str = Field(default="./data")
    config_file: Optional[str] = Field(default=None)

    # Sub-settings
    store: StoreSettings = StoreSettings()
    sync: SyncSettings = SyncSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_prefix="MODSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = AppSettings()


def get_settings() -> AppSettings:
    """Get application settings."""
    return settings
