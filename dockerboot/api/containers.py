"""Container status and event endpoints."""

from typing import List

import structlog
from fastapi import APIRouter, Query

from ..core.events import ContainerEvent
from ..dependencies.services import EventBusDep, ManagerRegistryDep
from ..models.container import (
    ContainerEventRequest,
    ContainerEventResponse,
    ContainerStatus,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/containers", response_model=List[ContainerStatus])
async def list_containers(
    registry: ManagerRegistryDep,
    inspect: bool = Query(False, description="Ask the engine for each container's status"),
):
    """List every managed container."""
    statuses = []
    for lifecycle in registry.lifecycles():
        engine_status = await lifecycle.manager.inspect() if inspect else None
        statuses.append(lifecycle.status(engine_status))
    return statuses


@router.get("/containers/{key}", response_model=ContainerStatus)
async def get_container(
    key: str,
    registry: ManagerRegistryDep,
    inspect: bool = Query(False, description="Ask the engine for the container's status"),
):
    """Get one managed container by key."""
    lifecycle = registry.get_lifecycle(key)
    engine_status = await lifecycle.manager.inspect() if inspect else None
    return lifecycle.status(engine_status)


@router.post(
    "/containers/events",
    response_model=ContainerEventResponse,
    status_code=202,
)
async def broadcast_container_event(request: ContainerEventRequest, bus: EventBusDep):
    """Publish an action to every managed container."""
    await bus.publish(ContainerEvent(action=request.action, source="api"))
    logger.info("Container event published", action=request.action.value, key=None)
    return ContainerEventResponse(action=request.action, key=None)


@router.post(
    "/containers/{key}/events",
    response_model=ContainerEventResponse,
    status_code=202,
)
async def publish_container_event(
    key: str,
    request: ContainerEventRequest,
    registry: ManagerRegistryDep,
    bus: EventBusDep,
):
    """Publish an action to one managed container."""
    registry.get_lifecycle(key)
    await bus.publish(ContainerEvent(action=request.action, source="api", key=key))
    logger.info("Container event published", action=request.action.value, key=key)
    return ContainerEventResponse(action=request.action, key=key)
