"""Dependency injection for dockerboot."""

from .auth import verify_api_key
from .services import (
    EventBusDep,
    ManagerRegistryDep,
    get_event_bus,
    get_manager_registry,
    set_manager_registry,
)

__all__ = [
    "verify_api_key",
    "EventBusDep",
    "ManagerRegistryDep",
    "get_event_bus",
    "get_manager_registry",
    "set_manager_registry",
]
