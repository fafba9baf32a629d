"""Pytest configuration and shared fixtures."""

import os
from typing import Dict, Iterator, List, Optional
from unittest.mock import MagicMock

import pytest
from docker import APIClient

# Keep the developer's engine settings out of unit tests; integration tests read them from here
ENGINE_ENV_VARS = ("DOCKER_API_VERSION", "DOCKER_URI", "DOCKER_SERVER_ADDRESS", "DOCKER_CERT_PATH")
ENGINE_ENV = {name: os.environ.pop(name) for name in ENGINE_ENV_VARS if name in os.environ}

from containerctl.config import (
    DOCKER_CERT_PATH,
    DOCKER_SERVER_ADDRESS,
    DOCKER_URI,
    DOCKER_VERSION,
)
from containerctl.services.container import ContainerLifecycleManager, EngineConnection

CONTAINER_ID = "3f2c9a1b7d4e8f60a1b2c3d4e5f60718293a4b5c6d7e8f90a1b2c3d4e5f60718"


class ClosingFeed:
    """Iterable byte feed that records how far it was read and whether it was closed."""

    def __init__(self, chunks: List[bytes], error: Optional[Exception] = None):
        self.chunks = list(chunks)
        self.error = error
        self.consumed = 0
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self.chunks:
            self.consumed += 1
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True


def running_container_attrs(container_id: str = CONTAINER_ID, running: bool = True) -> Dict:
    """Engine inspect payload for a container."""
    return {
        "Id": container_id,
        "Name": "/quirky_mysql",
        "Created": "2024-05-01T10:00:00.000000000Z",
        "Image": "sha256:0123456789ab",
        "State": {
            "Status": "running" if running else "exited",
            "Running": running,
            "Paused": False,
            "Restarting": False,
            "ExitCode": 0,
            "Error": "",
            "StartedAt": "2024-05-01T10:00:01.000000000Z",
            "FinishedAt": "0001-01-01T00:00:00Z",
        },
        "Config": {
            "Image": "mysql:5.7",
            "Env": ["MYSQL_ROOT_PASSWORD=x", "PATH=/usr/local/bin:/usr/bin"],
        },
        "NetworkSettings": {
            "Ports": {
                "3306/tcp": [{"HostIp": "0.0.0.0", "HostPort": "49153"}],
                "33060/tcp": None,
            }
        },
    }


@pytest.fixture
def properties():
    """Complete engine connection properties."""
    return {
        DOCKER_VERSION: "1.22",
        DOCKER_URI: "tcp://localhost:2375",
        DOCKER_SERVER_ADDRESS: "localhost",
        DOCKER_CERT_PATH: "/certs",
    }


@pytest.fixture
def pull_feed():
    """Image pull progress feed that emits three lines then closes."""
    return ClosingFeed(
        [
            b'{"status":"Pulling from library/mysql","id":"5.7"}\r\n',
            b'{"status":"Digest: sha256:abc"}\r\n',
            b'{"status":"Status: Downloaded newer image for mysql:5.7"}\r\n',
        ]
    )


@pytest.fixture
def mock_api(pull_feed):
    """Mock low-level Docker API client."""
    api = MagicMock(spec=APIClient)

    api.pull.return_value = pull_feed
    api.create_host_config.side_effect = lambda **kwargs: {"PublishAllPorts": kwargs.get("publish_all_ports")}
    api.create_container.return_value = {"Id": CONTAINER_ID, "Warnings": []}
    api.start.return_value = None
    api.stop.return_value = None
    api.remove_container.return_value = None
    api.inspect_container.return_value = running_container_attrs()
    api.logs.return_value = ClosingFeed([b"mysqld: ready for connections.\n"])

    return api


@pytest.fixture
def mock_connection(mock_api):
    """Mock engine connection exposing the mock API client."""
    connection = MagicMock(spec=EngineConnection)
    connection.api = mock_api
    connection.registry_auth.return_value = {"serveraddress": "localhost"}
    return connection


@pytest.fixture
def connection_factory(mock_connection):
    """Connection factory returning the mock connection."""
    return MagicMock(return_value=mock_connection)


@pytest.fixture
def manager(properties, connection_factory):
    """Lifecycle manager wired to the mock connection."""
    return ContainerLifecycleManager(properties, connection_factory=connection_factory)


@pytest.fixture
def container_id():
    return CONTAINER_ID


@pytest.fixture
def make_feed():
    """Factory for byte feeds: make_feed([b"line\n"], error=None)."""
    return ClosingFeed


@pytest.fixture
def container_attrs():
    """Factory for engine inspect payloads."""
    return running_container_attrs


@pytest.fixture
def engine_properties():
    """Connection properties for a live engine, taken from the environment at startup."""
    if "DOCKER_URI" not in ENGINE_ENV:
        pytest.skip("DOCKER_URI not set, no engine to test against")
    return {
        DOCKER_VERSION: ENGINE_ENV.get("DOCKER_API_VERSION", "auto"),
        DOCKER_URI: ENGINE_ENV["DOCKER_URI"],
        DOCKER_SERVER_ADDRESS: ENGINE_ENV.get("DOCKER_SERVER_ADDRESS", ""),
        DOCKER_CERT_PATH: ENGINE_ENV.get("DOCKER_CERT_PATH", ""),
    }
