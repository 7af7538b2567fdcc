"""Container lifecycle data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class LifecycleMode(str, Enum):
    """Whether a container follows the host application's start/stop phases."""

    START_AND_STOP = "START_AND_STOP"
    START_ONLY = "START_ONLY"
    NONE = "NONE"

    @property
    def starts_with_host(self) -> bool:
        return self is not LifecycleMode.NONE

    @property
    def stops_with_host(self) -> bool:
        return self is LifecycleMode.START_AND_STOP


class ContainerAction(str, Enum):
    """Actions that can be requested through the event bus."""

    START = "START"
    STOP = "STOP"
    REMOVE = "REMOVE"


class ManagerPhase(str, Enum):
    """Tracked state of a container manager."""

    IDLE = "idle"  # nothing tracked
    RUNNING = "running"  # created and started
    STOPPED = "stopped"  # stopped, id still tracked


@dataclass
class ManagerState:
    """Mutable state owned by one container manager.

    ``resource_id`` is the engine id of the container this manager created
    last, kept until that container is removed through the manager.
    """

    phase: ManagerPhase = ManagerPhase.IDLE
    resource_id: Optional[str] = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_running(self) -> bool:
        return self.phase == ManagerPhase.RUNNING

    def mark_running(self, resource_id: str) -> None:
        self.phase = ManagerPhase.RUNNING
        self.resource_id = resource_id
        self.updated_at = datetime.now(timezone.utc)

    def mark_stopped(self) -> None:
        self.phase = ManagerPhase.STOPPED
        self.updated_at = datetime.now(timezone.utc)

    def clear(self) -> None:
        self.phase = ManagerPhase.IDLE
        self.resource_id = None
        self.updated_at = datetime.now(timezone.utc)


class ContainerStatus(BaseModel):
    """Snapshot of a manager for the HTTP API."""

    key: str = Field(..., description="Container key from the configuration")
    container_name: str
    image_name: str
    lifecycle_mode: LifecycleMode
    phase: ManagerPhase
    resource_id: Optional[str] = None
    alive: bool = Field(False, description="Host lifecycle intent flag")
    engine_status: Optional[str] = Field(
        None, description="Status reported by the engine, when requested"
    )
    updated_at: datetime


class ContainerEventRequest(BaseModel):
    """Request body for publishing a container event."""

    action: ContainerAction = Field(..., description="START, STOP or REMOVE")


class ContainerEventResponse(BaseModel):
    """Acknowledgement of a queued container event."""

    action: ContainerAction
    key: Optional[str] = Field(None, description="Target key, or null for broadcast")
    queued: bool = True
