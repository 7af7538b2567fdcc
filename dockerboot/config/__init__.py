"""Configuration management for dockerboot.

Application-level settings come from the environment (or a ``.env`` file).
The managed containers themselves are described in a separate YAML file,
see :mod:`dockerboot.config.docker`.

Usage:
    from dockerboot.config import settings

    settings.api_port
    settings.docker_config_file
"""

import os
import secrets
from typing import Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .docker import (
    ContainerConfig,
    DockerConfig,
    RegistryConfig,
    load_docker_config,
)


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000, ge=1, le=65535)
    api_debug: bool = Field(default=False)
    api_reload: bool = Field(default=False)
    enable_docs: bool = Field(default=True)

    # Authentication Configuration
    api_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(24),
        min_length=16,
        validate_default=True,
        description="Key required by the container control endpoints",
    )

    # Container definitions
    docker_config_file: str = Field(
        default="docker.yml",
        description="Path to the YAML file describing managed containers",
    )

    # Engine call limits
    image_pull_timeout_seconds: int = Field(
        default=600,
        ge=1,
        le=7200,
        description="Upper bound for draining an image pull stream",
    )
    stop_timeout_seconds: int = Field(
        default=10,
        ge=0,
        le=600,
        description="Grace period passed to the engine before a stop kills the container",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)
    enable_access_logs: bool = Field(default=True)

    @field_validator("api_key")
    @classmethod
    def warn_auto_generated_api_key(cls, v):
        """Log a warning if API_KEY was not explicitly set."""
        if not os.environ.get("API_KEY"):
            structlog.get_logger("config").warning(
                "API_KEY not set in environment; using auto-generated key. "
                "Set API_KEY explicitly for production use.",
                auto_generated_key=v,
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unsupported log level: {v}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Only json and console renderers are available."""
        fmt = v.lower()
        if fmt not in ("json", "console"):
            raise ValueError(f"Unsupported log format: {v}")
        return fmt


# Global settings instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "ContainerConfig",
    "DockerConfig",
    "RegistryConfig",
    "load_docker_config",
]
