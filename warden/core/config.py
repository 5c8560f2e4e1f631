"""
Core configuration module using Pydantic Settings.

This module defines all application settings loaded from environment variables.
All configuration must go through this Settings class - NO hardcoded values.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Settings are validated using Pydantic with type hints.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = Field(default="Warden")
    version: str = Field(default="0.1.0")
    description: str = Field(
        default="User management and role-based access control API"
    )
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development"
    )
    debug: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    reload: bool = Field(default=False)

    # -------------------------------------------------------------------------
    # Security Settings
    # -------------------------------------------------------------------------
    secret_key: str = Field(
        ...,
        min_length=32,
        description="Key used to digest access token secrets. Must be at least 32 characters.",
    )

    # Access Token Configuration
    token_expire_minutes: int | None = Field(
        default=None,
        ge=1,
        description="Lifetime of issued access tokens. None means tokens never expire.",
    )
    token_secret_bytes: int = Field(default=40, ge=16, le=128)
    token_default_name: str = Field(default="auth_token")

    # Argon2id Password Hashing Configuration
    argon2_time_cost: int = Field(default=2, ge=1, le=10)
    argon2_memory_cost: int = Field(default=65536, ge=1024)  # 64 MB
    argon2_parallelism: int = Field(default=4, ge=1, le=16)

    # -------------------------------------------------------------------------
    # Access Control
    # -------------------------------------------------------------------------
    default_guard: str = Field(default="api", max_length=50)
    default_role: str | None = Field(
        default="User",
        description="Role assigned to newly registered users, if it exists",
    )
    seed_access_catalog: bool = Field(
        default=True,
        description="Create catalog roles and permissions on startup",
    )
    public_paths: str = Field(
        default="/api/register,/api/login",
        description="Comma-separated list of paths that skip token authentication",
    )

    @field_validator("public_paths")
    @classmethod
    def normalize_public_paths(cls, v: str) -> str:
        """Strip whitespace and trailing slashes from public paths."""
        paths = [path.strip().rstrip("/") for path in v.split(",") if path.strip()]
        return ",".join(paths)

    # -------------------------------------------------------------------------
    # Database Configuration
    # -------------------------------------------------------------------------
    database_url: str = Field(
        ...,
        description="SQLAlchemy async connection string (postgresql+asyncpg://...)",
    )

    # Connection Pool Settings
    db_pool_size: int = Field(default=5, ge=1, le=50)
    db_max_overflow: int = Field(default=10, ge=0, le=100)
    db_pool_recycle: int = Field(default=3600, ge=300)  # Seconds
    db_pool_pre_ping: bool = Field(default=True)
    db_pool_timeout: int = Field(default=30, ge=1)
    db_create_tables: bool = Field(
        default=False,
        description="Create missing tables on startup (development and tests)",
    )

    # -------------------------------------------------------------------------
    # Redis Configuration
    # -------------------------------------------------------------------------
    redis_url: str | None = Field(
        default=None,
        description="Redis connection string for rate limiting storage",
    )

    # -------------------------------------------------------------------------
    # CORS Settings
    # -------------------------------------------------------------------------
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="Comma-separated list of allowed CORS origins"
    )
    cors_allow_credentials: bool = Field(default=True)

    # -------------------------------------------------------------------------
    # Rate Limiting
    # -------------------------------------------------------------------------
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_login: str = Field(default="10/minute")

    # -------------------------------------------------------------------------
    # Logging Configuration
    # -------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: Literal["json", "console"] = Field(default="console")
    log_file_enabled: bool = Field(default=True)
    log_file_path: str = Field(default="logs/app.log")
    log_file_max_bytes: int = Field(default=10485760)  # 10 MB
    log_file_backup_count: int = Field(default=5)

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get parsed CORS origins as list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def public_paths_list(self) -> list[str]:
        """Get parsed public paths as list."""
        return [path for path in self.public_paths.split(",") if path]

    @property
    def rate_limit_storage_uri(self) -> str:
        """Storage backend for slowapi: Redis when configured, memory otherwise."""
        return self.redis_url or "memory://"


# Singleton instance of settings
# Import this instance throughout the application
settings = Settings()
