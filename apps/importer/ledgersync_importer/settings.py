"""Importer settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_POSTGRES_PASSWORD = "ledgersync_dev_password"


class Settings(BaseSettings):
    """Importer settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = None
    postgres_user: str = "ledgersync"
    postgres_password: str = DEV_POSTGRES_PASSWORD
    postgres_db: str = "ledgersync"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    # Ledger core feed
    feed_url: str = "http://localhost:1999"
    feed_access_token: Optional[str] = None  # user:secret, required in non-dev
    feed_alias: str = "ledgersync-importer"
    feed_filter: str = ""  # empty filter matches every transaction
    feed_timeout_ms: int = 60 * 1000  # long-poll bound

    # Custom columns
    custom_columns_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Metrics
    metrics_port: Optional[int] = None

    environment: str = "development"

    @property
    def database_url_computed(self) -> str:
        """Compute database URL if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() in ("development", "test", "dev")

    def validate_production_settings(self):
        """Validate settings for production environment."""
        if self.is_development:
            return
        if not self.database_url and self.postgres_password == DEV_POSTGRES_PASSWORD:
            raise ValueError(
                "POSTGRES_PASSWORD must be set in production. "
                "Do not use the development default."
            )
        if not self.feed_access_token:
            raise ValueError("FEED_ACCESS_TOKEN is required in production.")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
