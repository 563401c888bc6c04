import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


# =============================================================================
# Social Sign-in Configuration
# =============================================================================


class ProviderConfig(BaseModel):
    """Configuration for one identity provider plugin.

    The `config` field is validated by the plugin itself, so external providers
    can define their own config schemas.
    """

    provider: str  # Entry point name in the "socialauth.providers" group
    config: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self.provider


class SocialConfig(BaseModel):
    """Routing and redirect targets of the social sign-in flow."""

    base_path: str = "/auth"  # Requests to {base_path}/{provider_id} are dispatched
    connect_segment: str = "connect"  # {base_path}/{provider_id}/connect adds a connection
    post_login_url: str = "/"
    signup_url: str = "/signup"
    failure_url: str = "/signin"
    connection_added_redirect_url: str = "/connect"  # Used when a provider names none
    error_parameter: str = "error"  # Query parameter carrying the failure code
    update_connections: bool = True  # Refresh stored connection data on every login
    default_authorities: list[str] = ["ROLE_USER"]
    providers: list[ProviderConfig] = []

    @field_validator("base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        return "/" + v.strip("/") if v.strip("/") else ""


class SessionConfig(BaseModel):
    """Browser session cookie configuration."""

    secret_key: str = ""  # Must be set in production
    cookie_name: str = "socialauth_session"
    max_age: int = 14 * 24 * 60 * 60  # 14 days
    same_site: Literal["lax", "strict", "none"] = "lax"
    https_only: bool = False


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "socialauth"
    version: str = "0.1.0"
    description: str = "Social sign-in and account connection service"


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "sqlite+aiosqlite:///socialauth.db"
    echo: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from SOCIALAUTH_LOG_FILE env var."""
        return os.environ.get("SOCIALAUTH_LOG_FILE")


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by SOCIALAUTH_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("SOCIALAUTH_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Config(BaseSettings):
    # These are BaseModel, so env_nested_delimiter handles their env vars
    server: Server = Server()
    social: SocialConfig = SocialConfig()
    session: SessionConfig = SessionConfig()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = {
        "env_prefix": "SOCIALAUTH_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows SOCIALAUTH_SOCIAL__SIGNUP_URL override
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - SOCIALAUTH_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so every logger picks up
    the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
