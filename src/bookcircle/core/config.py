"""
Configuration module for BookCircle.

This module defines the Settings class, which loads environment variables
and provides application-wide configuration: the database URL, the running
environment, and logging options.

Usage:
    Import the `settings` object to access configuration throughout the project.
"""

import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        DATABASE_URL (str): Database connection string.
        ENVIRONMENT (str): Current environment (e.g., 'production', 'development').
        LOG_LEVEL (str): Logging level used by the scripts ('INFO', 'DEBUG', ...).
        SQL_ECHO (bool): Echo the SQL emitted by the engine.
    """
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./bookcircle.db")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    SQL_ECHO: bool = False

    @property
    def is_development(self) -> bool:
        """
        Returns True when running outside production.

        Returns:
            bool: Whether ENVIRONMENT is anything other than 'production'.
        """
        return self.ENVIRONMENT.lower() != "production"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
