"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Handles API")
    app_env: str = Field(default="development")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Database
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/handles",
        description="PostgreSQL connection URL with asyncpg driver",
    )
    read_database_url: str = Field(
        default="",
        description="Optional read replica URL used for handle search",
    )

    # Handles
    handle_rename_cooldown_days: int = Field(
        default=7,
        description="Minimum number of days between two full handle renames",
    )
    handle_search_default_limit: int = Field(default=10)
    handle_search_max_limit: int = Field(default=50)
    handle_suggestion_tag_length: int = Field(
        default=3,
        description="Length of the random tag appended to 'taken' suggestions",
    )
    handle_backfill_max_attempts: int = Field(
        default=3,
        description="Attempts per account when a backfill write loses a race",
    )

    # JWT Authentication
    jwt_secret_key: str = Field(
        default="CHANGE-ME-IN-PRODUCTION",
        description="Secret key used to verify bearer tokens",
    )
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=30)

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable/disable rate limiting (disable for tests)",
    )
    rate_limit_read: str = Field(default="30/minute")
    rate_limit_write: str = Field(default="10/minute")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_database_url(self) -> str:
        """Ensure the database URL uses the asyncpg driver scheme."""
        return _with_async_driver(self.database_url)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def async_read_database_url(self) -> str:
        """Read replica URL, falling back to the primary."""
        if not self.read_database_url:
            return self.async_database_url
        return _with_async_driver(self.read_database_url)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def _with_async_driver(url: str) -> str:
    # Hosting providers hand out plain postgresql:// URLs.
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
