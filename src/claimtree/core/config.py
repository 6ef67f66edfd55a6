"""
Claimtree - Configuration
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    VERSION: str = "1.0.0"
    ENV: str = "development"

    # Snapshot building
    VERIFY_PROOFS_ON_BUILD: bool = True

    # Metrics
    METRICS_ENABLED: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
