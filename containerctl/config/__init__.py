"""Configuration management for containerctl.

Settings are read from environment variables (and an optional ``.env``
file) and grouped into logical sections.

Usage:
    from containerctl.config import settings

    # Grouped access
    settings.docker.uri
    settings.logging.level

    # Flat access
    settings.docker_uri
    settings.log_level
"""

from typing import Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .docker import (
    DOCKER_CERT_PATH,
    DOCKER_SERVER_ADDRESS,
    DOCKER_URI,
    DOCKER_VERSION,
    PROPERTY_ENV_VARS,
    DockerConfig,
)
from .logging import LoggingConfig


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    # Docker engine connection (no defaults, all four are required by the manager)
    docker_api_version: str | None = Field(default=None, description="Docker Engine API version, e.g. 1.41")
    docker_uri: str | None = Field(default=None, description="Docker Engine endpoint URI, e.g. tcp://localhost:2376")
    docker_server_address: str | None = Field(default=None, description="Registry server address used for image pulls")
    docker_cert_path: str | None = Field(default=None, description="Directory holding ca.pem, cert.pem and key.pem")
    docker_timeout: int = Field(default=60, ge=10, description="Request timeout in seconds for non-streaming calls")

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str | None = Field(default=None, description="json or console; unset picks console on a terminal")
    log_file: str | None = Field(default=None)
    log_max_size_mb: int = Field(default=100, ge=1)
    log_backup_count: int = Field(default=5, ge=1)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v is None:
            return v
        if v.lower() not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v.lower()

    # ========================================================================
    # GROUPED CONFIGURATION ACCESS
    # ========================================================================

    @property
    def docker(self) -> DockerConfig:
        """Access Docker engine configuration group."""
        return DockerConfig(
            docker_api_version=self.docker_api_version,
            docker_uri=self.docker_uri,
            docker_server_address=self.docker_server_address,
            docker_cert_path=self.docker_cert_path,
            docker_timeout=self.docker_timeout,
        )

    @property
    def logging(self) -> LoggingConfig:
        """Access logging configuration group."""
        return LoggingConfig(
            log_level=self.log_level,
            log_format=self.log_format,
            log_file=self.log_file,
            log_max_size_mb=self.log_max_size_mb,
            log_backup_count=self.log_backup_count,
        )

    def get_docker_properties(self) -> Dict[str, Optional[str]]:
        """Get the engine connection settings keyed by property name."""
        return self.docker.as_properties()


# Global settings instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DockerConfig",
    "LoggingConfig",
    "DOCKER_VERSION",
    "DOCKER_URI",
    "DOCKER_SERVER_ADDRESS",
    "DOCKER_CERT_PATH",
    "PROPERTY_ENV_VARS",
]
