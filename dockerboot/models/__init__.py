"""Data models for dockerboot."""

from .container import (
    ContainerAction,
    ContainerEventRequest,
    ContainerEventResponse,
    ContainerStatus,
    LifecycleMode,
    ManagerPhase,
    ManagerState,
)
from .errors import (
    ContainerNotFoundError,
    ContainerOperationError,
    DockerBootException,
    ErrorDetail,
    ErrorResponse,
    ErrorType,
    ServiceUnavailableError,
)

__all__ = [
    "ContainerAction",
    "ContainerEventRequest",
    "ContainerEventResponse",
    "ContainerStatus",
    "LifecycleMode",
    "ManagerPhase",
    "ManagerState",
    "ContainerNotFoundError",
    "ContainerOperationError",
    "DockerBootException",
    "ErrorDetail",
    "ErrorResponse",
    "ErrorType",
    "ServiceUnavailableError",
]
