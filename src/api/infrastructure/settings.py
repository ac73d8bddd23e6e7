"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class DatabaseSettings(BaseSettings):
    """Control-plane database connection settings.

    The control-plane database holds the tenant catalog and doubles as the
    process-wide default connection for requests that resolve no tenant.

    Environment variables:
        PILLAR_DB_URL: Full SQLAlchemy URL; overrides the individual parts
        PILLAR_DB_HOST: Database host (default: localhost)
        PILLAR_DB_PORT: Database port (default: 5432)
        PILLAR_DB_DATABASE: Database name (default: pillar)
        PILLAR_DB_USERNAME: Database user (default: pillar)
        PILLAR_DB_PASSWORD: Database password (required in production)
        PILLAR_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        PILLAR_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="PILLAR_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        description="Explicit connection URL (takes precedence over parts)",
    )
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="pillar", description="Database name")
    username: str = Field(default="pillar", description="Database username")
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

    @property
    def default_connection_string(self) -> str:
        """The process-wide default connection URL.

        Returns the explicit URL when one is configured (even an empty one,
        which the data layer reports as a configuration error), otherwise a
        ``postgresql+asyncpg`` URL assembled from the individual parts.
        """
        if self.url is not None:
            return self.url

        url = URL.create(
            drivername="postgresql+asyncpg",
            username=self.username,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.database,
        )
        return url.render_as_string(hide_password=False)


class TenancySettings(BaseSettings):
    """Request-time tenant resolution settings.

    Environment variables:
        PILLAR_TENANCY_TENANT_HEADER: Header carrying a tenant slug
        PILLAR_TENANCY_TENANT_ID_HEADER: Header carrying a numeric tenant id
        PILLAR_TENANCY_PUBLIC_PATHS: JSON list of paths exempt from enforcement
    """

    model_config = SettingsConfigDict(
        env_prefix="PILLAR_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    tenant_header: str = Field(default="X-Tenant")
    tenant_id_header: str = Field(default="X-Tenant-Id")
    public_paths: list[str] = Field(
        default=[
            "/health",
            "/static",
            "/favicon.ico",
            "/docs",
            "/redoc",
            "/openapi.json",
            "/api/auth",
            "/api/onboarding",
            "/onboarding",
        ],
        description="Path prefixes that may proceed without a resolved tenant",
    )


class ProvisioningSettings(BaseSettings):
    """Tenant database provisioning settings.

    The template connection string may contain ``{SLUG}`` and ``{DB}``
    placeholders (matched case-insensitively), e.g.
    ``postgresql+asyncpg://pillar:secret@db:5432/{DB}``.

    Environment variables:
        PILLAR_PROVISIONING_TEMPLATE_CONNECTION_STRING: Tenant URL template
        PILLAR_PROVISIONING_ADMIN_DATABASE: Server maintenance database (default: postgres)
        PILLAR_PROVISIONING_DATABASE_PREFIX: Prefix for tenant databases (default: pillar_)
        PILLAR_PROVISIONING_AUTO_ACTIVATE_TENANTS: Activate after provisioning (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="PILLAR_PROVISIONING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    template_connection_string: str | None = Field(default=None)
    admin_database: str = Field(default="postgres", min_length=1)
    database_prefix: str = Field(default="pillar_")
    auto_activate_tenants: bool = Field(default=True)
    default_roles: list[str] = Field(
        default=["Administrator", "Manager", "Salesperson"],
        min_length=1,
    )
    admin_role: str = Field(default="Administrator", min_length=1)
    temporary_password_length: int = Field(default=12, ge=8, le=128)

    @model_validator(mode="after")
    def validate_admin_role(self) -> "ProvisioningSettings":
        """Validate the administrator role is one of the seeded roles."""
        normalized = {role.upper() for role in self.default_roles}
        if self.admin_role.upper() not in normalized:
            raise ValueError(
                f"admin_role ({self.admin_role}) must be one of default_roles"
            )
        return self


class AuthSettings(BaseSettings):
    """Bearer token settings for the identity consumed by tenant resolution.

    Environment variables:
        PILLAR_AUTH_SECRET_KEY: Signing secret for access tokens
        PILLAR_AUTH_ALGORITHM: JWS algorithm (default: HS256)
        PILLAR_AUTH_SUPER_ADMIN_ROLE: Role required for tenant administration
            (default: SuperAdmin)
    """

    model_config = SettingsConfigDict(
        env_prefix="PILLAR_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    secret_key: SecretStr = Field(default=SecretStr(""))
    algorithm: str = Field(default="HS256")
    super_admin_role: str = Field(default="SuperAdmin", min_length=1)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Pillar API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")


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
    """Get cached tenant resolution settings."""
    return TenancySettings()


@lru_cache
def get_provisioning_settings() -> ProvisioningSettings:
    """Get cached provisioning settings."""
    return ProvisioningSettings()


@lru_cache
def get_auth_settings() -> AuthSettings:
    """Get cached authentication settings."""
    return AuthSettings()
