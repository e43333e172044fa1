"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./paperflow.db"

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    project_name: str = "Paper Workflow Engine"
    version: str = "1.0.0"

    # Transactions
    transaction_timeout_seconds: float = 10.0

    # Workflow policy
    # Resubmitting an ACCEPTED or REJECTED paper fails instead of moving it
    # to REVISION_REQUESTED.
    strict_status_transitions: bool = False
    # At most one PENDING review per (paper, version, reviewer).
    unique_pending_reviews: bool = False
    # Reviewer assignment moves SUBMITTED/REVISION_REQUESTED papers to UNDER_REVIEW.
    mark_under_review_on_assignment: bool = False
    reject_self_citations: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
