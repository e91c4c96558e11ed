"""
Application configuration management.
"""

from typing import Annotated, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GitHub
    github_token: Optional[str] = None
    github_api_base: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"

    # Repositories shown when the caller does not pass any
    watched_repositories: Annotated[List[str], NoDecode] = []

    # Synchronization
    per_page: int = 100
    request_timeout_seconds: float = 30.0
    sync_timeout_seconds: float = 60.0
    stagnant_after_days: int = 5

    # Application
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @field_validator("watched_repositories", mode="before")
    @classmethod
    def _split_repositories(cls, value):
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("per_page")
    @classmethod
    def _cap_per_page(cls, value: int) -> int:
        # GitHub rejects page sizes above 100
        return max(1, min(value, 100))


def get_settings() -> Settings:
    """Build a fresh Settings instance from the current environment."""
    return Settings()


# Global settings instance
settings = Settings()
