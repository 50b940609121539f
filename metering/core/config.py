"""
Application configuration settings
"""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """
    # Project metadata
    PROJECT_NAME: str = "MicroJPEG Metering"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"

    # Database - SQLite locally, PostgreSQL in production
    DATABASE_URL: str = "sqlite+aiosqlite:///./metering.db"

    # Redis (rate ceilings)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    RATE_LIMIT_WINDOW_SECONDS: int = 3600

    # Administrative access (None disables admin endpoints and bypasses)
    ADMIN_API_KEY: Optional[str] = None

    # Enforcement
    ENFORCEMENT_ENABLED: bool = True
    ENFORCE_SIZE_WHEN_DISABLED: bool = False
    SETTINGS_CACHE_TTL_SECONDS: float = 5.0
    AUDIT_DENIED_DECISIONS: bool = False

    # Rolling usage window
    USAGE_WINDOW_DAYS: int = 30

    # Free / anonymous tier limits
    FREE_MONTHLY_REGULAR_OPERATIONS: int = 100
    FREE_MONTHLY_RAW_OPERATIONS: int = 100
    FREE_MAX_REGULAR_FILE_MB: int = 7
    FREE_MAX_RAW_FILE_MB: int = 15

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()
