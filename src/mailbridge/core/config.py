"""Configuration management for MailBridge.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded at application
startup and is immutable during runtime.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MAILBRIDGE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    app_name: str = "MailBridge"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/mailbridge.db"
    db_echo: bool = False

    # Security Settings
    secret_key: str = Field(
        default="change-me-in-production-use-openssl-rand-hex-32",
        description="Secret key for token signing",
    )
    token_expire_seconds: int = Field(default=24 * 60 * 60, gt=0)
    password_iterations: int = Field(default=100_000, ge=100_000)

    # Mail Settings
    mail_domain: str = "mailbridge.local"
    email_from: str = "noreply@mailbridge.local"
    resend_api_key: str | None = Field(
        default=None,
        description="Resend API key. Outbound mail is only logged when unset.",
    )

    # Retry Settings (delays in milliseconds)
    retry_max_retries: int = Field(default=3, ge=0)
    retry_base_delay_ms: int = Field(default=1000, ge=0)
    retry_max_delay_ms: int = Field(default=30000, ge=0)
    retry_backoff_multiplier: float = Field(default=2.0, ge=1.0)

    # Circuit Breaker Settings
    breaker_failure_threshold: int = Field(default=5, ge=1)
    breaker_recovery_timeout_ms: int = Field(default=60000, ge=0)
    breaker_success_threshold: int = Field(default=3, ge=1)

    # Message Listing Settings
    messages_default_limit: int = Field(default=50, ge=1)
    messages_max_limit: int = Field(default=200, ge=1)

    # CORS Settings
    cors_origins: list[str] = Field(default=["*"])
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "DELETE", "OPTIONS"])
    cors_allow_headers: list[str] = Field(default=["Content-Type", "Authorization"])

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("mail_domain")
    @classmethod
    def normalize_mail_domain(cls, v: str) -> str:
        """Store the mail domain lowercased and without a leading '@'."""
        return v.strip().lstrip("@").lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    This function caches the settings instance to avoid reloading
    configuration on every call. Settings are loaded once at startup.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
