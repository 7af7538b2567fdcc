"""Container management services.

This package provides Docker container management functionality split into:
- base.py: Resource manager contract
- client.py: Docker client factory and initialization
- manager.py: Per-container lifecycle state machine
- lifecycle.py: Binding of a manager to the host start/stop phases
- registry.py: Managers built from configuration, addressable by key
- utils.py: Shared utilities for container operations
"""

from .base import ResourceManager
from .client import DockerClientFactory
from .lifecycle import ContainerLifecycle
from .manager import ContainerManager
from .registry import ManagerRegistry
from .utils import classify_error, run_in_executor

__all__ = [
    "ResourceManager",
    "DockerClientFactory",
    "ContainerLifecycle",
    "ContainerManager",
    "ManagerRegistry",
    "classify_error",
    "run_in_executor",
]
