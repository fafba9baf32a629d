"""Docker container lifecycle control for pipeline auxiliary services."""

from ._version import __version__
from .models.errors import (
    ContainerControlError,
    EngineConnectionError,
    FeedReadError,
    MissingConfigurationError,
    URIParseError,
)
from .services.container import (
    ConnectionConfiguration,
    ContainerLifecycleManager,
    EngineConnection,
    LogStream,
)

__all__ = [
    "__version__",
    "ConnectionConfiguration",
    "ContainerLifecycleManager",
    "EngineConnection",
    "LogStream",
    "ContainerControlError",
    "EngineConnectionError",
    "FeedReadError",
    "MissingConfigurationError",
    "URIParseError",
]
