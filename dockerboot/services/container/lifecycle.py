"""Binds a container manager to the host application's start/stop phases."""

from typing import Optional

import structlog

from ...models.container import ContainerStatus, LifecycleMode
from .manager import ContainerManager

logger = structlog.get_logger(__name__)

# Every binding shares one phase: no ordering between containers
DEFAULT_PHASE = 0


class ContainerLifecycle:
    """Applies a container's lifecycle mode at host start and stop.

    ``is_alive`` reports what the host lifecycle last asked for, not what
    the engine is doing. A START_ONLY container keeps running after host
    stop while ``is_alive`` turns False.
    """

    def __init__(self, manager: ContainerManager):
        self._manager = manager
        self._running = False

    @property
    def manager(self) -> ContainerManager:
        return self._manager

    @property
    def key(self) -> str:
        return self._manager.key

    @property
    def lifecycle_mode(self) -> LifecycleMode:
        return self._manager.config.lifecycle_mode

    async def on_host_start(self) -> None:
        """Create and start the container unless the mode is NONE."""
        mode = self.lifecycle_mode
        if not mode.starts_with_host:
            logger.info(
                "Host starting, container is manually managed",
                container_type=self._manager.container_type,
                lifecycle_mode=mode.value,
            )
            return

        logger.info(
            "Host starting: running container",
            container_type=self._manager.container_type,
            lifecycle_mode=mode.value,
        )
        await self._manager.create_and_start()
        self._running = True

    async def on_host_stop(self) -> None:
        """Stop and remove the tracked container in START_AND_STOP mode."""
        mode = self.lifecycle_mode
        try:
            if mode.stops_with_host:
                logger.info(
                    "Host stopping: cleaning up container",
                    container_type=self._manager.container_type,
                )
                await self._manager.teardown()
            else:
                logger.info(
                    "Host stopping, leaving container in place",
                    container_type=self._manager.container_type,
                    lifecycle_mode=mode.value,
                )
        finally:
            self._running = False

    def is_alive(self) -> bool:
        return self._running

    def phase(self) -> int:
        return DEFAULT_PHASE

    def status(self, engine_status: Optional[str] = None) -> ContainerStatus:
        """Snapshot combining the manager's tracked state and the host flag."""
        cfg = self._manager.config
        state = self._manager.state
        return ContainerStatus(
            key=self.key,
            container_name=cfg.container_name,
            image_name=cfg.image_name,
            lifecycle_mode=cfg.lifecycle_mode,
            phase=state.phase,
            resource_id=state.resource_id,
            alive=self._running,
            engine_status=engine_status,
            updated_at=state.updated_at,
        )
