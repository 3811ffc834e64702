"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import URL


class Settings(BaseSettings):
    """Application configuration - single source of truth.

    All settings loaded from environment variables or .env files.
    Construction validates every field; an invalid environment raises
    pydantic.ValidationError and the process must not start.

    Usage:
        settings = get_settings()
        print(settings.database_url)
        print(settings.cors_origins_list)
    """

    # Application
    environment: Literal["dev", "prod", "test"] = Field(default="dev")
    debug: bool = Field(default=False)
    app_name: str = Field(default="boilerplate", min_length=1)
    app_version: str = Field(default="1.0.0", min_length=1)

    # Server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8080, ge=0, le=65535)
    server_idle_timeout: int = Field(
        default=60,
        gt=0,
        description="Seconds an idle keep-alive connection stays open.",
    )
    request_timeout: float = Field(
        default=15.0,
        gt=0,
        description="Deadline in seconds for the storage calls of one request.",
    )
    shutdown_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Grace period in seconds for in-flight requests on shutdown.",
    )

    # Database
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432, ge=1, le=65535)
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="postgres")
    db_name: str = Field(default="boilerplate")
    db_ssl_mode: Literal["disable", "allow", "prefer", "require", "verify-ca", "verify-full"] = Field(
        default="disable"
    )
    db_echo: bool = Field(default=False)
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    db_pool_recycle: int = Field(
        default=1800,
        description="Maximum connection lifetime in seconds before it is recycled.",
    )
    db_command_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-statement deadline in seconds enforced by the driver.",
    )
    db_create_schema: bool = Field(default=False)

    # CORS
    cors_origins: str = Field(default="http://localhost:3000")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="text")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case (e.g. ``debug``)."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: str) -> str:
        """Ensure at least one CORS origin is configured."""
        if not [origin for origin in v.split(",") if origin.strip()]:
            raise ValueError("CORS_ORIGINS must list at least one origin")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def database_url(self) -> URL:
        """Build async PostgreSQL URL (credentials escaped)."""
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query={"ssl": self.db_ssl_mode},
        )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "prod"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == "dev"

    @property
    def is_testing(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once and cached for the application lifecycle.
    For testing, clear the cache with: get_settings.cache_clear()

    Returns:
        Settings instance loaded from environment
    """
    return Settings()
