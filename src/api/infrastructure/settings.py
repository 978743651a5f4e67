"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        FACEBLOG_DB_HOST: Database host (default: localhost)
        FACEBLOG_DB_PORT: Database port (default: 5432)
        FACEBLOG_DB_DATABASE: Database name (default: faceblog)
        FACEBLOG_DB_USERNAME: Database user (default: faceblog)
        FACEBLOG_DB_PASSWORD: Database password (required in production)
        FACEBLOG_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        FACEBLOG_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        FACEBLOG_DB_STATEMENT_TIMEOUT_MS: Server-side statement timeout, 0 disables (default: 0)
    """

    model_config = SettingsConfigDict(
        env_prefix="FACEBLOG_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="faceblog", description="Database name")
    username: str = Field(default="faceblog", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )
    statement_timeout_ms: int = Field(
        default=0,
        description="Server-side statement timeout in milliseconds (0 disables)",
        ge=0,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class TenancySettings(BaseSettings):
    """Schema-per-tenant settings.

    Environment variables:
        FACEBLOG_TENANCY_SCHEMA_PREFIX: Prefix for tenant schema names (default: tenant_)
        FACEBLOG_TENANCY_SHARED_SCHEMA: Schema holding the tenant catalog (default: public)
        FACEBLOG_TENANCY_BASE_DOMAIN: Platform domain tenants live under (default: faceblog.com)
        FACEBLOG_TENANCY_RESERVED_SUBDOMAINS: JSON list of system labels
            that never belong to a tenant (default: ["www", "api", "admin"])
        FACEBLOG_TENANCY_PROVISIONING_TIMEOUT_SECONDS: Upper bound for one
            provisioning transaction (default: 30)
    """

    model_config = SettingsConfigDict(
        env_prefix="FACEBLOG_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    schema_prefix: str = Field(
        default="tenant_",
        description="Prefix prepended to the sanitized subdomain",
        pattern=r"^[a-z_][a-z0-9_]{0,11}$",
    )
    shared_schema: str = Field(
        default="public",
        description="Schema that holds the shared tenant catalog",
    )
    base_domain: str = Field(
        default="faceblog.com",
        description="Domain under which tenants get their subdomain",
    )
    reserved_subdomains: list[str] = Field(
        default_factory=lambda: ["www", "api", "admin"],
        description="System labels that can never be provisioned or resolved",
    )
    provisioning_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for one provisioning transaction",
        gt=0,
    )

    @field_validator("base_domain")
    @classmethod
    def normalize_base_domain(cls, value: str) -> str:
        """Lowercase the base domain and drop surrounding dots."""
        return value.strip().strip(".").lower()

    @field_validator("reserved_subdomains")
    @classmethod
    def normalize_reserved(cls, value: list[str]) -> list[str]:
        """Lowercase reserved labels."""
        return [label.strip().lower() for label in value if label.strip()]


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Faceblog Tenancy", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def tenancy(self) -> TenancySettings:
        """Get tenancy settings."""
        return get_tenancy_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_tenancy_settings() -> TenancySettings:
    """Get cached tenancy settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return TenancySettings()
