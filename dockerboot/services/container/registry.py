"""Registry of container managers built from configuration."""

import asyncio
from typing import Dict, Iterator, List, Optional

import docker
import structlog

from ...config.docker import DockerConfig
from ...core.events import ContainerEvent, EventBus
from ...models.errors import ContainerNotFoundError
from .lifecycle import ContainerLifecycle
from .manager import ContainerManager

logger = structlog.get_logger(__name__)


class ManagerRegistry:
    """One manager and lifecycle binding per enabled container, by key."""

    def __init__(self):
        self._lifecycles: Dict[str, ContainerLifecycle] = {}
        self._subscribed: Optional[EventBus] = None

    @classmethod
    def from_config(
        cls,
        config: DockerConfig,
        client: docker.DockerClient,
        pull_timeout: Optional[float] = None,
        stop_timeout: Optional[int] = None,
    ) -> "ManagerRegistry":
        """Build a registry from a loaded :class:`DockerConfig`.

        Disabled definitions are skipped.
        """
        registry = cls()
        if not config.containers:
            logger.warning("No docker containers configured")
            return registry

        logger.info("Registering container managers", containers=len(config.containers))
        for key, container_config in config.containers.items():
            if not container_config.enabled:
                logger.info("Container disabled, skipping", container_type=key)
                continue
            manager = ContainerManager(
                container_config,
                client,
                pull_timeout=pull_timeout,
                stop_timeout=stop_timeout,
            )
            registry.register(manager)
        return registry

    def register(self, manager: ContainerManager) -> ContainerLifecycle:
        """Add ``manager`` under its key and wrap it in a lifecycle binding."""
        if manager.key in self._lifecycles:
            raise ValueError(f"Container manager already registered: {manager.key}")
        lifecycle = ContainerLifecycle(manager)
        self._lifecycles[manager.key] = lifecycle
        if self._subscribed is not None:
            self._subscribed.register_handler(ContainerEvent, manager.handle_event)
        logger.info("Registered container manager", container_type=manager.key)
        return lifecycle

    def get(self, key: str) -> ContainerManager:
        return self.get_lifecycle(key).manager

    def get_lifecycle(self, key: str) -> ContainerLifecycle:
        try:
            return self._lifecycles[key]
        except KeyError:
            raise ContainerNotFoundError(key) from None

    def keys(self) -> List[str]:
        return list(self._lifecycles.keys())

    def managers(self) -> List[ContainerManager]:
        return [lifecycle.manager for lifecycle in self._lifecycles.values()]

    def lifecycles(self) -> List[ContainerLifecycle]:
        return list(self._lifecycles.values())

    def __len__(self) -> int:
        return len(self._lifecycles)

    def __contains__(self, key: str) -> bool:
        return key in self._lifecycles

    def __iter__(self) -> Iterator[ContainerManager]:
        return iter(self.managers())

    # =========================================================================
    # Event bus wiring
    # =========================================================================

    def subscribe(self, bus: EventBus) -> None:
        """Register every manager's event handler on ``bus``."""
        for manager in self.managers():
            bus.register_handler(ContainerEvent, manager.handle_event)
        self._subscribed = bus
        logger.info("Container managers subscribed to events", managers=len(self))

    def unsubscribe(self) -> None:
        if self._subscribed is None:
            return
        for manager in self.managers():
            self._subscribed.unregister_handler(ContainerEvent, manager.handle_event)
        self._subscribed = None

    # =========================================================================
    # Host phases
    # =========================================================================

    async def start_all(self) -> None:
        """Run the host-start hook of every binding concurrently.

        Raises:
            The first failure, after every failure has been logged
        """
        lifecycles = self.lifecycles()
        results = await asyncio.gather(
            *(lifecycle.on_host_start() for lifecycle in lifecycles),
            return_exceptions=True,
        )

        failures = []
        for lifecycle, result in zip(lifecycles, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Container failed to start with host",
                    container_type=lifecycle.key,
                    error=str(result),
                )
                failures.append(result)

        if failures:
            raise failures[0]
        logger.info("Container managers started", managers=len(lifecycles))

    async def stop_all(self) -> None:
        """Run the host-stop hook of every binding; failures are logged only."""
        lifecycles = self.lifecycles()
        results = await asyncio.gather(
            *(lifecycle.on_host_stop() for lifecycle in lifecycles),
            return_exceptions=True,
        )

        for lifecycle, result in zip(lifecycles, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Container cleanup failed during host stop",
                    container_type=lifecycle.key,
                    error=str(result),
                )
        logger.info("Container managers stopped", managers=len(lifecycles))
