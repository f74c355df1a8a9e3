"""Configuration management using pydantic-settings."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7788, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # Storage Configuration
    database_path: str = Field(default="./data/edushare.db", description="DuckDB database file")

    # Messaging Configuration
    poll_interval: float = Field(default=5.0, gt=0, description="Message poll interval in seconds")
    store_base_url: Optional[str] = Field(default=None, description="Base URL of a remote message store")
    request_timeout: float = Field(default=10.0, gt=0, description="HTTP request timeout in seconds")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Optional[str] = Field(default="./logs/edushare.log", description="Log file path")


# Global settings instance
settings = Settings()
