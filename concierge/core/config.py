"""Application configuration."""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str

    # Application
    app_name: str = "Concierge Order Compiler"
    admin_base_url: str = "http://localhost:3000"
    log_level: str = "INFO"

    # Catalog: when set, menus come from this YAML file instead of the database
    catalog_file: Optional[str] = None

    # Free-text matching
    max_candidates: int = 3

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
