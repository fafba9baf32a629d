"""Data models for container lifecycle operations.

These models represent the values exchanged with the Docker engine:
environment variable pairs passed at creation and the structured
snapshot returned by an inspect call.
"""

from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, Field


class EnvironmentVariable(NamedTuple):
    """A (name, value) pair for a container's launch environment."""

    name: str
    value: str

    def to_engine(self) -> str:
        return f"{self.name}={self.value}"


EnvPair = Union[EnvironmentVariable, Tuple[str, str]]


def format_environment(env_variables: Optional[Iterable[EnvPair]]) -> Optional[List[str]]:
    """Serialize (name, value) pairs to ``name=value`` strings.

    Input order is preserved. Returns None when there is nothing to pass so
    the engine receives no environment list at all.
    """
    if not env_variables:
        return None
    formatted = [EnvironmentVariable(*pair).to_engine() for pair in env_variables]
    return formatted or None


class ContainerState(BaseModel):
    """Runtime state reported by the engine."""

    status: str = Field(default="unknown", description="created, running, paused, exited, ...")
    running: bool = False
    paused: bool = False
    restarting: bool = False
    exit_code: Optional[int] = None
    error: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    @classmethod
    def from_engine(cls, state: Optional[Dict[str, Any]]) -> "ContainerState":
        state = state or {}
        return cls(
            status=state.get("Status") or "unknown",
            running=bool(state.get("Running", False)),
            paused=bool(state.get("Paused", False)),
            restarting=bool(state.get("Restarting", False)),
            exit_code=state.get("ExitCode"),
            error=state.get("Error") or None,
            started_at=state.get("StartedAt"),
            finished_at=state.get("FinishedAt"),
        )


class PortBinding(BaseModel):
    """A container port published on the host."""

    container_port: str
    host_ip: Optional[str] = None
    host_port: Optional[str] = None


class ContainerInspection(BaseModel):
    """Structured snapshot of an engine-side container.

    ``attrs`` keeps the full engine payload for callers that need fields
    not surfaced here.
    """

    id: str
    name: Optional[str] = None
    image: Optional[str] = None
    created: Optional[str] = None
    state: ContainerState = Field(default_factory=ContainerState)
    env: List[str] = Field(default_factory=list)
    ports: List[PortBinding] = Field(default_factory=list)
    attrs: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_running(self) -> bool:
        return self.state.running

    @classmethod
    def from_engine(cls, attrs: Dict[str, Any]) -> "ContainerInspection":
        """Build a snapshot from the engine's inspect response."""
        config = attrs.get("Config") or {}
        network = attrs.get("NetworkSettings") or {}

        ports = []
        for container_port, bindings in (network.get("Ports") or {}).items():
            if not bindings:
                ports.append(PortBinding(container_port=container_port))
                continue
            for binding in bindings:
                ports.append(
                    PortBinding(
                        container_port=container_port,
                        host_ip=binding.get("HostIp"),
                        host_port=binding.get("HostPort"),
                    )
                )

        name = attrs.get("Name")
        return cls(
            id=attrs.get("Id", ""),
            name=name.lstrip("/") if name else None,
            image=config.get("Image") or attrs.get("Image"),
            created=attrs.get("Created"),
            state=ContainerState.from_engine(attrs.get("State")),
            env=list(config.get("Env") or []),
            ports=ports,
            attrs=attrs,
        )
