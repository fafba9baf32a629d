"""Container lifecycle management."""

from typing import Callable, Iterable, List, Mapping, Optional, Union
from urllib.parse import urlsplit

import structlog
from docker.errors import DockerException

from ...config import Settings
from ...models.container import ContainerInspection, EnvPair, format_environment
from ...models.errors import URIParseError
from ...utils.config_validator import required_setting_keys
from .client import ConnectionConfiguration, EngineConnection
from .streams import LogStream

logger = structlog.get_logger(__name__)

ConnectionFactory = Callable[..., EngineConnection]


class ContainerLifecycleManager:
    """Pulls images and drives containers through their lifecycle.

    The manager holds no state besides its engine connection. Containers
    are addressed by the id the engine returns on creation, and every
    transition (create, start, stop, remove) is sent to the engine without
    client-side checks. Engine errors are logged and re-raised unchanged.
    """

    def __init__(
        self,
        configuration: Union[ConnectionConfiguration, Mapping[str, Optional[str]]],
        timeout: Optional[int] = None,
        connection_factory: Optional[ConnectionFactory] = None,
    ):
        """Validate the configuration and connect to the engine.

        Args:
            configuration: A ConnectionConfiguration, or a mapping keyed by
                the property names from required_setting_keys()
            timeout: Request timeout in seconds for non-streaming calls
            connection_factory: Builds the EngineConnection; defaults to
                EngineConnection.connect

        Raises:
            MissingConfigurationError: if a required setting is absent
            EngineConnectionError: if the engine cannot be reached
        """
        if not isinstance(configuration, ConnectionConfiguration):
            configuration = ConnectionConfiguration.from_properties(configuration)
        self.configuration = configuration

        factory = connection_factory or EngineConnection.connect
        self._connection = factory(configuration, timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, connection_factory: Optional[ConnectionFactory] = None
    ) -> "ContainerLifecycleManager":
        """Create a manager from application settings."""
        return cls(
            settings.get_docker_properties(),
            timeout=settings.docker_timeout,
            connection_factory=connection_factory,
        )

    @staticmethod
    def required_setting_keys() -> List[str]:
        """Property keys that must be set to initialize the Docker client."""
        return required_setting_keys()

    @property
    def connection(self) -> EngineConnection:
        return self._connection

    def pull_image(self, image_name: str, tag: str) -> None:
        """Pull an image, logging progress until the engine closes the feed.

        There is no early exit on progress content and no timeout: the call
        returns only when the engine ends the feed.

        docker-py hands back a generator over the HTTP response, not the
        response itself. Closing the feed stops that generator; the response
        is released on a normal end of feed, otherwise when it is collected.

        Raises:
            docker.errors.APIError: if the engine rejects the pull
            FeedReadError: if reading the progress feed fails
        """
        logger.info(f"Pulling Docker image: {image_name}:{tag}")
        try:
            feed = self._connection.api.pull(
                image_name,
                tag=tag,
                stream=True,
                auth_config=self._connection.registry_auth(),
            )
        except DockerException as e:
            logger.error(f"Failed to pull image {image_name}:{tag}: {e}")
            raise

        with LogStream(feed, source=f"pull {image_name}:{tag}") as progress:
            for line in progress:
                logger.info(line)

        logger.info(f"Successfully pulled image: {image_name}:{tag}")

    def create_container(
        self,
        image_name: str,
        tag: str,
        env_variables: Optional[Iterable[EnvPair]] = None,
    ) -> str:
        """Pull the image and create a container from it.

        Args:
            image_name: Image repository, e.g. ``mysql``
            tag: Image tag, e.g. ``5.7``
            env_variables: Optional (name, value) pairs, passed to the engine
                as ``name=value`` strings in the given order

        Returns:
            The engine-assigned container id
        """
        self.pull_image(image_name, tag)

        api = self._connection.api
        image = f"{image_name}:{tag}"
        environment = format_environment(env_variables)

        try:
            response = api.create_container(
                image=image,
                environment=environment,
                host_config=api.create_host_config(publish_all_ports=True),
            )
        except DockerException as e:
            logger.error(f"Failed to create container from {image}: {e}")
            raise

        container_id = response["Id"]
        for warning in response.get("Warnings") or []:
            logger.warning(f"Engine warning for container {container_id[:12]}: {warning}")
        logger.info(f"Created container {container_id[:12]} from {image}")
        return container_id

    def start_container(self, container_id: str) -> None:
        """Start a container. All exposed ports are published on the host."""
        try:
            self._connection.api.start(container_id)
        except DockerException as e:
            logger.error(f"Failed to start container {container_id[:12]}: {e}")
            raise
        logger.info(f"Started container {container_id[:12]}")

    def stop_container(self, container_id: str) -> None:
        """Stop a container."""
        try:
            self._connection.api.stop(container_id)
        except DockerException as e:
            logger.error(f"Failed to stop container {container_id[:12]}: {e}")
            raise
        logger.info(f"Stopped container {container_id[:12]}")

    def delete_container(self, container_id: str) -> None:
        """Remove a container.

        The container is not stopped first; removing a running container
        fails or succeeds as the engine decides.
        """
        try:
            self._connection.api.remove_container(container_id)
        except DockerException as e:
            logger.error(f"Failed to remove container {container_id[:12]}: {e}")
            raise
        logger.info(f"Removed container {container_id[:12]}")

    def inspect_container(self, container_id: str) -> ContainerInspection:
        """Query the engine for a container's current status and metadata."""
        try:
            attrs = self._connection.api.inspect_container(container_id)
        except DockerException as e:
            logger.error(f"Failed to inspect container {container_id[:12]}: {e}")
            raise
        return ContainerInspection.from_engine(attrs)

    def log_container(self, container_id: str) -> LogStream:
        """Follow a container's combined stdout/stderr from the start of its history.

        The returned stream is not read here. It keeps producing lines for
        as long as the engine keeps the feed open; the caller must close it.
        """
        try:
            feed = self._connection.api.logs(
                container_id,
                stdout=True,
                stderr=True,
                stream=True,
                follow=True,
                tail="all",
            )
        except DockerException as e:
            logger.error(f"Failed to get logs for container {container_id[:12]}: {e}")
            raise
        return LogStream(feed, source=f"logs {container_id[:12]}")

    def get_host(self) -> Optional[str]:
        """Return the host component of the configured endpoint URI.

        Returns None for URIs without a host, such as unix socket paths.

        Raises:
            URIParseError: if the endpoint URI is malformed
        """
        return parse_host(self.configuration.endpoint_uri)

    def close(self) -> None:
        """Release the engine connection."""
        self._connection.close()

    def __enter__(self) -> "ContainerLifecycleManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def parse_host(uri: str) -> Optional[str]:
    """Extract the host from an endpoint URI."""
    if any(c.isspace() for c in uri):
        raise URIParseError(uri, "contains whitespace")
    try:
        parts = urlsplit(uri)
        host = parts.hostname
        # urlsplit defers port parsing until the attribute is read
        _ = parts.port
    except ValueError as e:
        raise URIParseError(uri, str(e)) from e
    return host
