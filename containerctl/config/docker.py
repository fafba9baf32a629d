"""Docker engine connection configuration."""

from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

# Property keys understood by the lifecycle manager
DOCKER_VERSION = "docker.version"
DOCKER_URI = "docker.uri"
DOCKER_SERVER_ADDRESS = "docker.server_address"
DOCKER_CERT_PATH = "docker.cert_path"

# Environment variable read for each property key
PROPERTY_ENV_VARS = {
    DOCKER_VERSION: "DOCKER_API_VERSION",
    DOCKER_URI: "DOCKER_URI",
    DOCKER_SERVER_ADDRESS: "DOCKER_SERVER_ADDRESS",
    DOCKER_CERT_PATH: "DOCKER_CERT_PATH",
}


class DockerConfig(BaseSettings):
    """Docker engine connection settings."""

    api_version: str | None = Field(default=None, alias="docker_api_version")
    uri: str | None = Field(default=None, alias="docker_uri")
    server_address: str | None = Field(default=None, alias="docker_server_address")
    cert_path: str | None = Field(default=None, alias="docker_cert_path")
    timeout: int = Field(default=60, ge=10, alias="docker_timeout")

    class Config:
        env_prefix = ""
        extra = "ignore"

    def as_properties(self) -> Dict[str, Optional[str]]:
        """Return the connection settings keyed by property name."""
        return {
            DOCKER_VERSION: self.api_version,
            DOCKER_URI: self.uri,
            DOCKER_SERVER_ADDRESS: self.server_address,
            DOCKER_CERT_PATH: self.cert_path,
        }
