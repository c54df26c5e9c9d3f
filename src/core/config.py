"""Configuration management for the handover ledger service."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Record store configuration
    store_backend: Literal["sqlite", "memory", "http"] = Field(
        default="sqlite", description="Which record store backs per-user task lists"
    )
    sqlite_db_path: str = Field(default="data/coo.db", description="SQLite database file path")
    store_key_prefix: str = Field(default="executive_db_v2_", description="Prefix for per-owner store keys")

    # Remote REST store (optional)
    remote_store_url: str | None = Field(default=None, description="Base URL of the remote record store")
    remote_store_api_key: str | None = Field(default=None, description="API key sent to the remote record store")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")
    environment: str = Field(default="development", description="Deployment environment name")

    # Handover behaviour
    default_handover_remark: str = Field(
        default="Task completed", description="Remark used when a handover is sent without one"
    )

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # HTTP Status Codes
    HTTP_NOT_FOUND: int = 404

    # Remote store paths
    REMOTE_STORE_PATH: str = "/stores"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
