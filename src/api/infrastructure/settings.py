"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Room registry database connection settings.

    Environment variables:
        ROOMS_DB_HOST: Database host (default: localhost)
        ROOMS_DB_PORT: Database port (default: 5432)
        ROOMS_DB_DATABASE: Database name (default: rooms)
        ROOMS_DB_USERNAME: Database user (default: rooms)
        ROOMS_DB_PASSWORD: Database password (required in production)
        ROOMS_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        ROOMS_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
        ROOMS_DB_ECHO: Log SQL statements (default: false)
        ROOMS_DB_APPLICATION_NAME: Name shown in pg_stat_activity
    """

    model_config = SettingsConfigDict(
        env_prefix="ROOMS_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="rooms", description="Database name")
    username: str = Field(default="rooms", description="Database username")
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
    echo: bool = Field(default=False, description="Log SQL statements")
    application_name: str = Field(
        default="room-reconciler",
        description="Name reported to PostgreSQL in pg_stat_activity",
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


class MatrixSettings(BaseSettings):
    """Matrix homeserver settings for the automation identity.

    Environment variables:
        ROOMS_MATRIX_HOMESERVER_URL: Client-server API base URL
        ROOMS_MATRIX_SERVER_NAME: Server name used in user ids and room aliases
        ROOMS_MATRIX_AUTOMATION_USER: Localpart of the automation user
        ROOMS_MATRIX_APPSERVICE_TOKEN: Application service token (preferred)
        ROOMS_MATRIX_AUTOMATION_PASSWORD: Automation user password
        ROOMS_MATRIX_REQUEST_TIMEOUT_SECONDS: Per-request timeout (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="ROOMS_MATRIX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    homeserver_url: str = Field(
        default="http://localhost:8448",
        description="Matrix client-server API base URL",
    )
    server_name: str = Field(
        default="localhost",
        description="Matrix server name",
    )
    automation_user: str = Field(
        default="room-automation",
        description="Localpart of the automation user",
    )
    appservice_token: SecretStr | None = Field(
        default=None,
        description="Application service token",
    )
    automation_password: SecretStr | None = Field(
        default=None,
        description="Automation user password",
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Per-request timeout in seconds",
        gt=0,
        le=300,
    )

    @model_validator(mode="after")
    def validate_credentials(self) -> "MatrixSettings":
        """Require at least one automation credential."""
        if not self.appservice_token and not self.automation_password:
            raise ValueError(
                "Either appservice_token or automation_password must be set"
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="ROOMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Room Reconciler", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Minimum log level")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def matrix(self) -> MatrixSettings:
        """Get Matrix settings."""
        return get_matrix_settings()


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
def get_matrix_settings() -> MatrixSettings:
    """Get cached Matrix settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return MatrixSettings()
