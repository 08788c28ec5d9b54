# settings.py
"""
GymTracker Pro Settings.

Pydantic settings management with environment variable support.
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Environment
    ENV: str = Field(default="development", env="ENV")
    DEBUG: bool = Field(default=True, env="DEBUG")
    LOG_LEVEL: str = Field(default="INFO", env="LOG_LEVEL")

    # Supabase - both values are required to enable external auth
    SUPABASE_URL: Optional[str] = Field(
        default=None,
        env="SUPABASE_URL",
        description="Supabase project URL"
    )
    SUPABASE_ANON_KEY: Optional[str] = Field(
        default=None,
        env="SUPABASE_ANON_KEY",
        description="Supabase public (anon) API key"
    )

    # Local storage used by the mock auth backend
    STORAGE_BACKEND: str = Field(
        default="file",
        env="STORAGE_BACKEND",
        description="Key/value storage backend: memory, file or redis"
    )
    STORAGE_PATH: str = Field(
        default="./gymtracker_storage.json",
        env="STORAGE_PATH",
        description="JSON file used when STORAGE_BACKEND=file"
    )
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        env="REDIS_URL",
        description="Redis connection URL (redis://[:password@]host:port/db)"
    )
    REDIS_KEY_PREFIX: str = Field(default="gymtracker:", env="REDIS_KEY_PREFIX")

    # Sessions
    SESSION_TTL_DAYS: int = Field(default=7, env="SESSION_TTL_DAYS")
    SESSION_KEY: str = Field(default="gymtracker_session", env="SESSION_KEY")
    USERS_KEY: str = Field(default="gymtracker_demo_users", env="USERS_KEY")
    ANAMNESIS_KEY: str = Field(default="anamnesis_completed", env="ANAMNESIS_KEY")

    # Sentry Error Tracking
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENVIRONMENT: str = "production"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase auth is configured."""
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    @property
    def auth_mode(self) -> str:
        """Name of the auth backend selected by the configuration."""
        return "supabase" if self.supabase_configured else "local"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
