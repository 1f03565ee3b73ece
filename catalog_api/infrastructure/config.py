"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    api_prefix: str = ""
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 3000

    # Authentication
    catalog_api_tokens: list[str] = ["dev-catalog-token-change-in-production"]

    # Storage (in-memory when unset)
    catalog_store_path: str | None = None

    # Errors
    expose_internal_errors: bool = True

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
