"""Docker engine connection and its configuration."""

import os
from typing import Any, Dict, Mapping, Optional

import docker
import requests
import structlog
from docker.errors import DockerException
from docker.tls import TLSConfig
from pydantic import BaseModel, ConfigDict

from ...config.docker import (
    DOCKER_CERT_PATH,
    DOCKER_SERVER_ADDRESS,
    DOCKER_URI,
    DOCKER_VERSION,
)
from ...models.errors import EngineConnectionError
from ...utils.config_validator import has_tls_material, validate_configuration

logger = structlog.get_logger(__name__)

# docker-py raises ValueError or TypeError for a malformed API version or endpoint port
CONNECT_ERRORS = (
    DockerException,
    requests.exceptions.RequestException,
    OSError,
    ValueError,
    TypeError,
)


class ConnectionConfiguration(BaseModel):
    """Validated, immutable Docker engine connection settings."""

    model_config = ConfigDict(frozen=True)

    api_version: str
    endpoint_uri: str
    server_address: str
    cert_path: str

    @classmethod
    def from_properties(cls, properties: Mapping[str, Optional[str]]) -> "ConnectionConfiguration":
        """Validate a property mapping and build the configuration from it."""
        validate_configuration(properties)
        return cls(
            api_version=properties[DOCKER_VERSION],
            endpoint_uri=properties[DOCKER_URI],
            server_address=properties[DOCKER_SERVER_ADDRESS],
            cert_path=properties[DOCKER_CERT_PATH],
        )

    def as_properties(self) -> Dict[str, str]:
        return {
            DOCKER_VERSION: self.api_version,
            DOCKER_URI: self.endpoint_uri,
            DOCKER_SERVER_ADDRESS: self.server_address,
            DOCKER_CERT_PATH: self.cert_path,
        }


def build_tls_config(cert_path: str) -> Optional[TLSConfig]:
    """Build client TLS settings from a certificate directory.

    The directory must hold ca.pem, cert.pem and key.pem; otherwise the
    connection is made without TLS.
    """
    if not has_tls_material(cert_path):
        if cert_path:
            logger.debug(f"No TLS material found in {cert_path}, connecting without TLS")
        return None

    return TLSConfig(
        client_cert=(
            os.path.join(cert_path, "cert.pem"),
            os.path.join(cert_path, "key.pem"),
        ),
        ca_cert=os.path.join(cert_path, "ca.pem"),
        verify=True,
    )


class EngineConnection:
    """Live handle to a Docker engine.

    Built once from a ConnectionConfiguration and owned by a single
    lifecycle manager. Call close() to release the transport.
    """

    def __init__(self, client: docker.DockerClient, configuration: ConnectionConfiguration):
        self.client = client
        self.configuration = configuration
        self._closed = False

    @classmethod
    def connect(
        cls, configuration: ConnectionConfiguration, timeout: Optional[int] = None
    ) -> "EngineConnection":
        """Connect to the engine and verify the handshake.

        Raises:
            EngineConnectionError: if the client cannot be built from the
                configured values or the engine does not answer a ping.
        """
        logger.info(
            f"Initializing docker client with version '{configuration.api_version}', "
            f"uri '{configuration.endpoint_uri}', server address '{configuration.server_address}', "
            f"docker cert path '{configuration.cert_path}'"
        )

        client = None
        try:
            kwargs: Dict[str, Any] = {
                "base_url": configuration.endpoint_uri,
                "version": configuration.api_version,
                "tls": build_tls_config(configuration.cert_path) or False,
            }
            if timeout is not None:
                kwargs["timeout"] = timeout

            client = docker.DockerClient(**kwargs)
            client.ping()
        except CONNECT_ERRORS as e:
            logger.error(f"Failed to create Docker client: {e}")
            if client is not None:
                client.close()
            raise EngineConnectionError(
                f"Failed to connect to Docker engine at '{configuration.endpoint_uri}': {e}"
            ) from e

        logger.info("Done initializing docker client")
        return cls(client, configuration)

    @property
    def api(self) -> docker.APIClient:
        """Low-level API client used for every engine call."""
        return self.client.api

    @property
    def closed(self) -> bool:
        return self._closed

    def registry_auth(self) -> Optional[Dict[str, str]]:
        """Registry auth payload carrying the configured server address."""
        if not self.configuration.server_address:
            return None
        return {"serveraddress": self.configuration.server_address}

    def ping(self) -> bool:
        """Check that the engine is reachable."""
        return self.client.ping()

    def close(self) -> None:
        """Close Docker client connection."""
        if self._closed:
            return
        self._closed = True
        self.client.close()
        logger.info("Docker client closed")
