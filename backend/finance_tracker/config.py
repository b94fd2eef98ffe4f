"""
Configuration settings for the application.
Loads environment variables and provides typed settings.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Personal Finance Tracker"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./finance_tracker.db"
    DATABASE_ECHO: bool = False

    # Update/delete of a missing id: False reports success anyway,
    # True reports "Transaction not found".
    STRICT_MUTATIONS: bool = False

    # CORS (Cross-Origin Resource Sharing)
    ALLOWED_ORIGINS: List[str] = ["*"]
    ALLOW_CREDENTIALS: bool = False

    class Config:
        """Pydantic config to load from .env file."""
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once on first use."""
    return Settings()
