"""Service dependency injection for the dockerboot API."""

from typing import Annotated, Optional

import structlog
from fastapi import Depends

from ..core.events import EventBus, event_bus
from ..models.errors import ServiceUnavailableError
from ..services.container import ManagerRegistry

logger = structlog.get_logger(__name__)

# Global reference to the manager registry (set by main.py lifespan)
_manager_registry: Optional[ManagerRegistry] = None


def set_manager_registry(registry: Optional[ManagerRegistry]) -> None:
    """Set the global manager registry reference.

    Called by main.py once the registry is built in lifespan, and with
    None on shutdown.
    """
    global _manager_registry
    _manager_registry = registry
    if registry is not None:
        logger.info("Manager registry registered with dependency injection", managers=len(registry))


def get_manager_registry() -> ManagerRegistry:
    """Get the manager registry; unavailable outside the app lifespan."""
    if _manager_registry is None:
        raise ServiceUnavailableError("container manager")
    return _manager_registry


def get_event_bus() -> EventBus:
    """Get the process event bus."""
    return event_bus


# Type aliases for dependency injection
ManagerRegistryDep = Annotated[ManagerRegistry, Depends(get_manager_registry)]
EventBusDep = Annotated[EventBus, Depends(get_event_bus)]
