# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the Academia
placement service. Settings are loaded from environment variables with
sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from academia.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> settings.placement.lock_timeout_seconds
    10.0
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GRADE_CODES: list[str] = [
    "PRY1",
    "PRY2",
    "PRY3",
    "PRY4",
    "PRY5",
    "PRY6",
    "JSS1",
    "JSS2",
    "JSS3",
    "SSS1",
    "SSS2",
    "SSS3",
]


class DatabaseSettings(BaseSettings):
    """Student records database configuration.

    Attributes:
        user: PostgreSQL username.
        password: PostgreSQL password.
        host: Database host address.
        port: Database port number.
        database: Database name.
        pool_size: Connection pool size.
        max_overflow: Maximum overflow connections.
        echo: Whether SQLAlchemy should echo statements.
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    user: str = "academia"
    password: SecretStr = SecretStr("academia_password")
    host: str = "localhost"
    port: int = 5432
    database: str = "academia"
    pool_size: int = 10
    max_overflow: int = 20
    echo: bool = False

    @property
    def url(self) -> str:
        """Build the async database URL from components."""
        pwd = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"

    @property
    def sync_url(self) -> str:
        """Build the sync database URL for migrations."""
        pwd = self.password.get_secret_value()
        return f"postgresql://{self.user}:{pwd}@{self.host}:{self.port}/{self.database}"


class JWTSettings(BaseSettings):
    """JWT authentication configuration.

    Attributes:
        secret_key: Secret key for signing tokens.
        algorithm: JWT signing algorithm.
        access_token_expire_minutes: Access token expiration time.
    """

    model_config = SettingsConfigDict(
        env_prefix="JWT_",
        extra="ignore",
    )

    secret_key: SecretStr = SecretStr("change-this-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(
        default=30,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )


class CORSSettings(BaseSettings):
    """CORS configuration for API.

    Attributes:
        origins: Comma-separated list of allowed origins.
        allow_credentials: Whether to allow credentials.
        allow_methods: Allowed HTTP methods.
        allow_headers: Allowed HTTP headers.
    """

    model_config = SettingsConfigDict(
        env_prefix="CORS_",
        extra="ignore",
    )

    origins: str = "http://localhost:3000,http://localhost:5173"
    allow_credentials: bool = True
    allow_methods: list[str] = ["*"]
    allow_headers: list[str] = ["*"]

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into a list."""
        return [origin.strip() for origin in self.origins.split(",") if origin.strip()]


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
        workers: Number of worker processes.
        reload: Whether to enable auto-reload.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 34000
    workers: int = 2
    reload: bool = False


class PlacementSettings(BaseSettings):
    """Grade/section placement engine configuration.

    Grade codes are scoped per school. The "default" entry applies to any
    school without its own list. With strict_grade_codes disabled, codes
    outside the list are accepted and stored as given.

    Attributes:
        lock_timeout_seconds: Maximum wait for a student's placement lock.
        max_conflict_retries: Re-read attempts after a stale-version commit.
        batch_concurrency: Maximum students processed at once in a batch.
        default_transfer_reason: Reason recorded when none is supplied.
        strict_grade_codes: Reject grade codes missing from the catalog.
        grade_codes: Allowed grade codes keyed by school id.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLACEMENT_",
        extra="ignore",
    )

    lock_timeout_seconds: float = 10.0
    max_conflict_retries: int = 3
    batch_concurrency: int = 16
    default_transfer_reason: str = "Internal transfer"
    strict_grade_codes: bool = False
    grade_codes: dict[str, list[str]] = Field(
        default_factory=lambda: {"default": list(DEFAULT_GRADE_CODES)}
    )

    @field_validator("lock_timeout_seconds")
    @classmethod
    def validate_lock_timeout(cls, value: float) -> float:
        """Lock timeout must be positive."""
        if value <= 0:
            raise ValueError("lock_timeout_seconds must be greater than zero")
        return value

    @field_validator("max_conflict_retries")
    @classmethod
    def validate_retries(cls, value: int) -> int:
        """Retries cannot be negative."""
        if value < 0:
            raise ValueError("max_conflict_retries cannot be negative")
        return value

    @field_validator("batch_concurrency")
    @classmethod
    def validate_batch_concurrency(cls, value: int) -> int:
        """At least one student must be processed at a time."""
        if value < 1:
            raise ValueError("batch_concurrency must be at least 1")
        return value


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Student records database settings.
        jwt: JWT authentication settings.
        cors: CORS settings.
        api: API server settings.
        placement: Placement engine settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    jwt: JWTSettings = Field(default_factory=JWTSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    api: APISettings = Field(default_factory=APISettings)
    placement: PlacementSettings = Field(default_factory=PlacementSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production with insecure defaults.
        """
        if self.environment == "production":
            default_jwt_secret = "change-this-in-production"
            if self.jwt.secret_key.get_secret_value() == default_jwt_secret:
                raise ValueError(
                    "JWT secret key must be changed from default in production. "
                    "Set JWT_SECRET_KEY environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or reloading configuration from the environment.
    """
    get_settings.cache_clear()
