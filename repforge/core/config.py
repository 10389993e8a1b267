"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List, Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "RepForge training progression API"
    VERSION: str = "0.1.0"
    AUTHORS: List[str] = ["RepForge team"]
    PROJECT_URL: str = "https://github.com/repforge/repforge-api"

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_DBNAME: str = "repforge"
    # Full URL; built from the parts above when not set explicitly.
    DATABASE_URL: Optional[str] = None

    # Security (tokens are issued by the external auth service)
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"

    # Progression rules
    XP_PER_COMPLETED_SET: int = 10
    LEVEL_XP_UNIT: int = 100
    DEFAULT_SESSION_DURATION: int = 60

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @model_validator(mode="after")
    def _assemble_database_url(self) -> "Settings":
        if not self.DATABASE_URL:
            self.DATABASE_URL = (f"postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}@{self.DATABASE_HOST}"
                                 f":{self.DATABASE_PORT}/{self.DATABASE_DBNAME}")
        return self


# Global settings instance
settings = Settings()
