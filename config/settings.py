"""Global settings.

Every user-configurable value is read from the environment or a ``.env``
file at start-up and exposed through the ``settings`` singleton.

Usage:
    1. Run ``python scripts/setup_env.py`` to generate ``.env``
    2. Or export the variables directly (``DATABASE_URL``, ``WEB_PORT``...)
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings - every field can be overridden via .env or env vars"""

    # ========== Database ==========
    database_url: str = "sqlite:///data/salon.db"

    # ========== Web API ==========
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    # ========== Logging ==========
    log_level: str = "INFO"
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
