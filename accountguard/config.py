"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - Secrets (database credentials) come from environment variables, never hardcoded
    - get_settings() is cached (lru_cache): single instance per process
    - Half-life, credit limit and tracking capacities are validated at load time

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from accountguard.core.domain_types import (
    DEFAULT_CREDIT_LIMIT, DEFAULT_CREDIT_HALF_LIFE,
    DEFAULT_MAX_DEVICE_HASHES, DEFAULT_MAX_INCORRECT_HASHES,
)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://accountguard:accountguard@db:5432/accountguard"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Account defaults (fixed per account once created)
    default_credit_limit: float = DEFAULT_CREDIT_LIMIT
    default_credit_half_life_hours: float = DEFAULT_CREDIT_HALF_LIFE.total_seconds() / 3600
    max_device_hashes_to_track: int = DEFAULT_MAX_DEVICE_HASHES
    max_incorrect_hashes_to_track: int = DEFAULT_MAX_INCORRECT_HASHES

    @field_validator("default_credit_half_life_hours")
    @classmethod
    def half_life_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("default_credit_half_life_hours must be positive")
        return v

    @field_validator("default_credit_limit")
    @classmethod
    def credit_limit_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("default_credit_limit cannot be negative")
        return v

    @field_validator("max_device_hashes_to_track", "max_incorrect_hashes_to_track")
    @classmethod
    def capacity_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("recency set capacities must be at least 1")
        return v

    # Persistence policy: save after every mutation, or only on AccountService.flush()
    persist_on_write: bool = True

    # Live accounts held by AccountService; least recently used are evicted past this
    max_cached_accounts: int = 10_000

    @field_validator("max_cached_accounts")
    @classmethod
    def cache_size_at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_cached_accounts must be at least 1")
        return v

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def default_credit_half_life(self) -> timedelta:
        return timedelta(hours=self.default_credit_half_life_hours)


@lru_cache
def get_settings() -> Settings:
    return Settings()
