"""Data models for containerctl."""

from .container import (
    ContainerInspection,
    ContainerState,
    EnvironmentVariable,
    PortBinding,
    format_environment,
)
from .errors import (
    ErrorType,
    ErrorDetail,
    ErrorResponse,
    ContainerControlError,
    MissingConfigurationError,
    EngineConnectionError,
    FeedReadError,
    URIParseError,
)

__all__ = [
    # Container models
    "ContainerInspection",
    "ContainerState",
    "EnvironmentVariable",
    "PortBinding",
    "format_environment",
    # Errors
    "ErrorType",
    "ErrorDetail",
    "ErrorResponse",
    "ContainerControlError",
    "MissingConfigurationError",
    "EngineConnectionError",
    "FeedReadError",
    "URIParseError",
]
