"""Application configuration using Pydantic Settings."""
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Storage
    storage_backend: Literal["mongo", "memory"] = "mongo"
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "goal_tracker"
    storage_collection: str = "storage"
    mongodb_timeout_ms: int = 2000

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Validation limits
    title_max_length: int = 100
    description_max_length: int = 500

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
