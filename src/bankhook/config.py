"""Centralized configuration management for the Bankhook server.

This module provides a Pydantic Settings-based configuration system that
consolidates Plaid credentials, HTTP server settings, record storage and
Link token defaults with environment variable integration and validation.
"""

import os
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WEBHOOK_URL = "https://www.example.com/server/plaid_webhook"


class PlaidConfig(BaseModel):
    """Plaid API configuration (server-side only).

    These credentials are never sent to the browser client.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., description="Plaid client ID")
    secret: str = Field(..., description="Plaid secret key")
    environment: Literal["sandbox", "development", "production"] = Field(
        default="sandbox", description="Plaid environment"
    )


class ServerConfig(BaseModel):
    """HTTP server settings."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="127.0.0.1", description="Interface to bind")
    port: int = Field(default=8000, ge=1, le=65535, description="Port to bind")
    static_dir: Path = Field(
        default=Path("public"), description="Directory served at / when present"
    )


class StorageConfig(BaseModel):
    """Connection record storage settings."""

    model_config = ConfigDict(frozen=True)

    user_data_file: Path = Field(
        default=Path("user_data.json"),
        description="JSON file holding the user's connection record",
    )

    @field_validator("user_data_file")
    @classmethod
    def validate_user_data_file(cls, v: Path) -> Path:
        """Ensure the record file is a JSON file."""
        if v.suffix != ".json":
            raise ValueError("User data file must end with .json")
        return v


class LinkConfig(BaseModel):
    """Static request parameters used when creating Link tokens."""

    model_config = ConfigDict(frozen=True)

    client_user_id: str = Field(default="testUser")
    client_name: str = Field(default="Webhook Test App", max_length=30)
    language: str = Field(default="en")
    products: tuple[str, ...] = Field(default=("transactions", "assets"))
    country_codes: tuple[str, ...] = Field(default=("US",))


class BankhookSettings(BaseSettings):
    """Main application settings with environment variable integration.

    Environment variables are loaded with the BANKHOOK_ prefix.
    For nested configs, use double underscores: BANKHOOK_SERVER__PORT

    The unprefixed variables used by the Plaid quickstart (PLAID_CLIENT_ID,
    PLAID_SECRET, PLAID_ENV, APP_PORT, WEBHOOK_URL) are honored as well.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BANKHOOK_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    plaid: PlaidConfig = Field(
        default_factory=lambda: PlaidConfig(
            client_id="", secret="", environment="sandbox"
        )
    )
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    link: LinkConfig = Field(default_factory=LinkConfig)

    webhook_url: str = Field(
        default=DEFAULT_WEBHOOK_URL,
        description="URL Plaid should deliver webhooks to",
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    def __init__(self, **kwargs: Any):
        """Initialize settings with legacy environment variable overrides."""
        if "plaid" not in kwargs:
            plaid_config: dict[str, Any] = {}
            client_id = os.getenv("PLAID_CLIENT_ID")
            secret = os.getenv("PLAID_SECRET")
            env = os.getenv("PLAID_ENV", "sandbox")

            if client_id:
                plaid_config["client_id"] = client_id
            if secret:
                plaid_config["secret"] = secret
            if env in ("sandbox", "development", "production"):
                plaid_config["environment"] = env

            if plaid_config and client_id and secret:
                kwargs["plaid"] = PlaidConfig(**plaid_config)

        if "server" not in kwargs:
            app_port = os.getenv("APP_PORT")
            if app_port:
                kwargs["server"] = ServerConfig(port=int(app_port))

        if "webhook_url" not in kwargs:
            webhook_url = os.getenv("WEBHOOK_URL")
            if webhook_url:
                kwargs["webhook_url"] = webhook_url

        super().__init__(**kwargs)

    def validate_required_credentials(self) -> None:
        """Validate that required Plaid credentials are present."""
        errors: list[str] = []

        if not self.plaid.client_id:
            errors.append("PLAID_CLIENT_ID is required")
        if not self.plaid.secret:
            errors.append("PLAID_SECRET is required")

        if errors:
            raise ValueError(f"Missing required configuration: {', '.join(errors)}")


# Global settings instance - lazy loaded
_settings: BankhookSettings | None = None


def get_settings() -> BankhookSettings:
    """Get the settings instance.

    Settings are loaded once and cached. Credentials are not validated here
    so that commands which never talk to Plaid (``bankhook status``) work
    without them; the server validates them at startup.

    Returns:
        BankhookSettings: The configuration instance
    """
    global _settings

    if _settings is None:
        # Expose unprefixed quickstart variables in .env to os.getenv
        load_dotenv()
        _settings = BankhookSettings()

    return _settings


def reload_settings() -> BankhookSettings:
    """Reload settings from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        BankhookSettings: The reloaded configuration instance
    """
    clear_settings_cache()
    return get_settings()


def clear_settings_cache() -> None:
    """Drop the cached settings instance."""
    global _settings
    _settings = None
