"""
Configuration management for the station agent.

Hybrid configuration system using YAML files and environment variables.
Priority: Environment variables > YAML config > Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional, Tuple, Type

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

SUPPORTED_ALGORITHMS = ("RS256", "ES256")
MESSAGE_TYPES = ("events", "state")


class Settings(BaseSettings):
    """
    Station configuration schema.

    Loads configuration from:
    1. Environment variables prefixed with STATION_ (highest priority)
    2. YAML configuration files
    3. Pydantic defaults (lowest priority)

    Configuration files:
        - config/default.yaml: Base defaults
        - config/production.yaml: Production overrides
        - config/development.yaml: Development overrides
        - config/test.yaml: Test overrides
    """

    model_config = SettingsConfigDict(
        env_prefix="STATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Station"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # Device identity (Cloud IoT Core registry coordinates)
    project_id: str = Field(default="awesome-sylph-271611")
    cloud_region: str = Field(default="us-central1")
    registry_id: str = Field(default="assignment1")
    device_id: str = Field(default="station")

    # Credentials
    private_key_file: str = Field(
        default="./rsa_private.pem", description="PEM private key path"
    )
    algorithm: str = Field(default="RS256", description="JWT signing algorithm")
    token_lifetime_minutes: int = Field(
        default=20,
        ge=1,
        le=24 * 60,
        description="JWT validity window in minutes",
    )

    # MQTT bridge
    mqtt_bridge_hostname: str = Field(default="mqtt.googleapis.com")
    mqtt_bridge_port: int = Field(default=8883, ge=1, le=65535)
    use_tls: bool = Field(default=True, description="Connect over TLS 1.2+")
    ca_certs: Optional[str] = Field(
        default=None, description="CA bundle path (system trust store if unset)"
    )
    keepalive: int = Field(default=60, ge=5, le=1200)
    connect_timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for CONNACK"
    )

    # Telemetry
    message_type: str = Field(default="events", description="events or state")
    publish_interval: float = Field(
        default=5.0, gt=0, description="Seconds between telemetry publishes"
    )

    # Recovery (off by default: errors are only logged)
    reconnect_enabled: bool = Field(
        default=False,
        description="Reconnect with a fresh token after a failed or dropped link",
    )
    reconnect_max_attempts: int = Field(default=5, ge=1)
    reconnect_initial_delay: float = Field(default=1.0, ge=0)
    reconnect_max_delay: float = Field(default=32.0, ge=0)
    token_refresh_enabled: bool = Field(
        default=False,
        description="Reconnect with a new token before the current one expires",
    )
    token_refresh_margin: int = Field(
        default=60,
        ge=0,
        description="Seconds before expiry at which the token is refreshed",
    )

    # Graceful Shutdown
    shutdown_timeout: int = Field(
        default=10,
        ge=1,
        description="Maximum seconds to wait for graceful shutdown",
    )

    # Logging
    log_level: str = Field(default="info")
    log_file: Optional[str] = Field(default=None)
    verbose: int = Field(default=1, ge=0, le=3)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        """Environment variables override values passed in from YAML."""
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Validate JWT algorithm."""
        v_upper = v.upper()
        if v_upper not in SUPPORTED_ALGORITHMS:
            raise ValueError(
                f"Invalid algorithm. Must be one of: {list(SUPPORTED_ALGORITHMS)}"
            )
        return v_upper

    @field_validator("message_type")
    @classmethod
    def validate_message_type(cls, v: str) -> str:
        """Validate telemetry topic suffix."""
        if v not in MESSAGE_TYPES:
            raise ValueError(f"Invalid message_type. Must be one of: {list(MESSAGE_TYPES)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["debug", "info", "warning", "error", "critical"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid log_level. Must be one of: {allowed}")
        return v_lower

    @property
    def token_lifetime_seconds(self) -> int:
        """JWT validity window in seconds."""
        return self.token_lifetime_minutes * 60


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
    config_dir: Optional[Path] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override
        config_dir: Optional directory holding the YAML files

    Returns:
        Settings instance

    Raises:
        ValidationError: If a configured value is invalid
    """
    # Project root (4 levels up: src/station/config/settings.py)
    project_root = Path(__file__).resolve().parent.parent.parent.parent
    config_dir = config_dir or project_root / "config"

    # Determine environment (explicit parameter > ENV var > default)
    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.development", "test.yaml"),
    }

    default_env_file, default_config_file = env_map.get(
        environment, (".env.production", "production.yaml")
    )
    if env_file is None:
        env_file = default_env_file
    if config_file is None:
        config_file = default_config_file

    # Load .env file FIRST (before Settings initialization)
    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    merged_config = {"ENV": environment}

    for path in (config_dir / "default.yaml", config_dir / config_file):
        if path.exists():
            with open(path, "r") as f:
                loaded = yaml.safe_load(f)
                if loaded:
                    merged_config.update(loaded)

    return Settings(**merged_config)


# Global settings singleton (lazy initialization)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or initialize global settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """
    Override global settings (for testing).

    Args:
        new_settings: New Settings instance to use
    """
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """
    Reset settings to force re-initialization (for testing).
    """
    global _settings
    _settings = None
