"""Container management services.

This package provides Docker container management functionality split into:
- client.py: engine connection configuration and the connection handle
- streams.py: line-oriented reading of engine feeds
- manager.py: Container lifecycle management
"""

from .client import ConnectionConfiguration, EngineConnection
from .manager import ContainerLifecycleManager
from .streams import LogStream

__all__ = [
    "ConnectionConfiguration",
    "EngineConnection",
    "ContainerLifecycleManager",
    "LogStream",
]
