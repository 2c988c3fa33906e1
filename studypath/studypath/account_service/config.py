"""
Configuration management for the account service
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-this-secret-in-prod"


class Settings(BaseSettings):
    """Account service configuration loaded from environment variables"""

    # Server Configuration
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "/app/logs"

    # Database Configuration
    DATABASE_URL: str = "sqlite:///./studypath.db"
    DB_TIMEOUT: int = 10

    # Token signing
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"

    # Session cache
    REDIS_URL: str = "redis://redis:6379"
    REDIS_PASSWORD: Optional[str] = None
    REDIS_SOCKET_TIMEOUT: float = 2.0
    REDIS_RETRY_INTERVAL: int = 30

    # Password hashing
    BCRYPT_ROUNDS: int = 10

    # CORS Configuration
    CORS_ORIGINS: List[str] = ["http://localhost"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def is_local(self) -> bool:
        return self.ENVIRONMENT.lower() in ("local", "development", "dev", "test")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Global settings instance
settings = get_settings()
