"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from functools import lru_cache

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from levelpay.config.constants import (
    LEVEL_INCOME_FEATURE_KEY,
    MAX_COMMISSION_LEVELS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str | None = Field(
        default="logs/levelpay.log",
        description="Rotating log file path (empty to log to stderr only)"
    )
    log_rotation: str = "1 day"
    log_retention: str = "7 days"

    # Commission engine
    level_income_feature_key: str = Field(
        default=LEVEL_INCOME_FEATURE_KEY,
        min_length=1,
        description="plan_settings.feature_key of the active commission schedule"
    )
    max_commission_levels: int = Field(
        default=MAX_COMMISSION_LEVELS,
        ge=1,
        le=MAX_COMMISSION_LEVELS,
        description="Upper bound on levels walked, whatever the schedule says"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql+asyncpg:// '
                '(or sqlite+aiosqlite:// for local runs)'
            )
        if v.startswith('postgresql://'):
            # Engine is async only
            v = v.replace('postgresql://', 'postgresql+asyncpg://', 1)
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f'Unknown log level: {v}')
        return level

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )
            if self.database_url.startswith('sqlite'):
                logger.warning(
                    'DATABASE_URL points to SQLite in production. '
                    'Concurrent distributions need PostgreSQL row-level locking.'
                )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
