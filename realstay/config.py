"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration shared by the services and the client library."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./realstay.db",
        description="SQLAlchemy database URL. Defaults to local SQLite for development.",
    )
    run_db_migrations: bool = Field(
        default=False,
        description="Whether the reviews service should create/update database tables on startup.",
    )
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    cors_allow_headers: List[str] = Field(
        default_factory=lambda: ["authorization", "x-client-info", "apikey", "content-type"],
        description="Request headers accepted on CORS preflight",
    )
    default_rate_limit: str = Field(default="120/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")
    log_dir: str = Field(default="logs", description="Directory for per-service HTTP audit logs")
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics on /metrics")

    newline_fallback_enabled: bool = Field(
        default=True,
        description="Retry recovery once against the message with a trailing newline appended",
    )

    reviews_service_url: str = Field(default="http://localhost:8004", description="Base URL of the reviews store")
    verifier_service_url: str = Field(default="http://localhost:8005", description="Base URL of the signature verifier")
    http_timeout: float = Field(default=10.0, description="Timeout (s) for client calls to the services")

    reviews_service_port: int = 8004
    verifier_service_port: int = 8005


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
