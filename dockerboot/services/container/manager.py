"""Container lifecycle management for one configured container."""

import asyncio
from functools import partial
from typing import Dict, Optional

import docker
import structlog
from docker.errors import DockerException, NotFound

from ...config import settings
from ...config.docker import ContainerConfig
from ...core.events import ContainerEvent
from ...models.container import ContainerAction, ManagerState
from ...models.errors import ContainerOperationError
from .base import ResourceManager
from .utils import (
    build_binds,
    build_port_bindings,
    classify_error,
    container_state,
    image_present,
    run_in_executor,
    split_image_reference,
)

logger = structlog.get_logger(__name__)

MANAGED_LABEL = "io.dockerboot.managed"
KEY_LABEL = "io.dockerboot.key"


class ContainerManager(ResourceManager):
    """Manages the lifecycle of one named container.

    Key behaviors:
    - Any container already holding the configured name is force-removed
      right before a new one is created
    - The image is pulled only when no local image carries the exact
      configured reference as one of its repo tags
    - The id of the last container created is tracked until that
      container is removed through this manager
    - Every state-changing operation runs under a per-manager lock, so
      manual calls, lifecycle hooks and events never interleave
    """

    def __init__(
        self,
        config: ContainerConfig,
        client: docker.DockerClient,
        pull_timeout: Optional[float] = None,
        stop_timeout: Optional[int] = None,
    ):
        """Initialize the container manager.

        Args:
            config: Definition of the container to manage
            client: Docker client shared by all managers
            pull_timeout: Seconds allowed for an image pull (defaults to settings)
            stop_timeout: Grace period for stops in seconds (defaults to settings)
        """
        self._config = config
        self._client = client
        self._pull_timeout = pull_timeout
        self._stop_timeout = stop_timeout
        self._state = ManagerState()
        self._lock = asyncio.Lock()

    @property
    def key(self) -> str:
        return self._config.key

    @property
    def container_type(self) -> str:
        return self._config.container_type

    @property
    def config(self) -> ContainerConfig:
        return self._config

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def current_resource_id(self) -> Optional[str]:
        return self._state.resource_id

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def _api(self):
        return self._client.api

    # =========================================================================
    # Resource operations
    # =========================================================================

    async def create_and_start(self) -> str:
        """Create and start a fresh container.

        Steps:
        1. Force-remove any container holding the configured name
        2. Pull the image if it is not present locally
        3. Create the container from the definition
        4. Start it and track its id

        Returns:
            Engine id of the started container

        Raises:
            ContainerOperationError: if any step fails; the cause is chained
        """
        async with self._lock:
            return await self._create_and_start()

    async def stop(self, resource_id: str) -> None:
        """Stop the container with ``resource_id``.

        Raises:
            ContainerOperationError: on any engine failure, including
                not-found and permission errors
        """
        async with self._lock:
            await self._stop(resource_id)

    async def remove(self, resource_id: str) -> None:
        """Remove the container with ``resource_id``.

        Removing the tracked container clears the tracked id.

        Raises:
            ContainerOperationError: on any engine failure
        """
        async with self._lock:
            await self._remove(resource_id)

    async def teardown(self) -> bool:
        """Stop and remove the tracked container as one locked sequence.

        Returns:
            True if a tracked container was torn down, False if none was tracked
        """
        async with self._lock:
            resource_id = self._state.resource_id
            if resource_id is None:
                logger.debug("No tracked container to tear down", container_type=self.container_type)
                return False
            await self._stop(resource_id)
            await self._remove(resource_id)
            return True

    async def inspect(self) -> Optional[str]:
        """Engine-reported status of the tracked container.

        Returns:
            ``State.Status`` (e.g. ``running``, ``exited``), or None when no
            container is tracked or the engine no longer knows it
        """
        resource_id = self._state.resource_id
        if resource_id is None:
            return None
        try:
            data = await run_in_executor(self._api.inspect_container, resource_id)
        except NotFound:
            return None
        except Exception as e:
            logger.error(
                "Failed to inspect container",
                container_type=self.container_type,
                container_id=resource_id[:12],
                error=str(e),
            )
            raise ContainerOperationError(
                self.container_type, "inspect", classify_error(e)
            ) from e
        return container_state(data)

    # =========================================================================
    # Event handling
    # =========================================================================

    async def handle_event(self, event: ContainerEvent) -> None:
        """React to a :class:`ContainerEvent` published on the event bus."""
        if not event.targets(self.key):
            return

        action = event.action
        logger.info(
            "Container event received",
            container_type=self.container_type,
            action=str(getattr(action, "value", action)),
            source=repr(event.source),
        )

        if action == ContainerAction.START:
            await self.create_and_start()
        elif action == ContainerAction.STOP:
            async with self._lock:
                if self._state.resource_id is None:
                    logger.debug("Stop requested with no tracked container", container_type=self.container_type)
                    return
                await self._stop(self._state.resource_id)
        elif action == ContainerAction.REMOVE:
            async with self._lock:
                if self._state.resource_id is None:
                    logger.debug("Remove requested with no tracked container", container_type=self.container_type)
                    return
                await self._remove(self._state.resource_id)
        else:
            logger.warning(
                "Unknown container event action",
                container_type=self.container_type,
                action=repr(action),
            )

    # =========================================================================
    # Private methods
    # =========================================================================

    async def _create_and_start(self) -> str:
        try:
            await self._remove_existing_container(self._config.container_name)
            await self._ensure_image()
            resource_id = await run_in_executor(self._create_container)
            await run_in_executor(self._api.start, resource_id)
        except asyncio.CancelledError:
            logger.warning(
                "Container start cancelled",
                container_type=self.container_type,
                container_name=self._config.container_name,
            )
            raise
        except Exception as e:
            logger.error(
                "Failed to create and start container",
                container_type=self.container_type,
                container_name=self._config.container_name,
                error=str(e),
                exc_info=True,
            )
            raise ContainerOperationError(
                self.container_type, "start", classify_error(e)
            ) from e

        self._state.mark_running(resource_id)
        logger.info(
            "Container started",
            container_type=self.container_type,
            container_name=self._config.container_name,
            container_id=resource_id[:12],
        )
        return resource_id

    async def _stop(self, resource_id: str) -> None:
        timeout = (
            self._stop_timeout
            if self._stop_timeout is not None
            else settings.stop_timeout_seconds
        )
        try:
            await run_in_executor(partial(self._api.stop, resource_id, timeout=timeout))
        except Exception as e:
            logger.error(
                "Failed to stop container",
                container_type=self.container_type,
                container_id=resource_id[:12],
                error=str(e),
            )
            raise ContainerOperationError(
                self.container_type, "stop", classify_error(e)
            ) from e

        if resource_id == self._state.resource_id:
            self._state.mark_stopped()
        logger.info(
            "Container stopped",
            container_type=self.container_type,
            container_id=resource_id[:12],
        )

    async def _remove(self, resource_id: str) -> None:
        try:
            await run_in_executor(self._api.remove_container, resource_id)
        except Exception as e:
            logger.error(
                "Failed to remove container",
                container_type=self.container_type,
                container_id=resource_id[:12],
                error=str(e),
            )
            raise ContainerOperationError(
                self.container_type, "remove", classify_error(e)
            ) from e

        if resource_id == self._state.resource_id:
            self._state.clear()
        logger.info(
            "Container removed",
            container_type=self.container_type,
            container_id=resource_id[:12],
        )

    async def _remove_existing_container(self, container_name: str) -> None:
        """Force-remove a container holding ``container_name``, if any."""
        try:
            await run_in_executor(self._api.inspect_container, container_name)
        except NotFound:
            logger.info(
                "No existing container found",
                container_type=self.container_type,
                container_name=container_name,
            )
            return

        logger.info(
            "Existing container found, removing",
            container_type=self.container_type,
            container_name=container_name,
        )
        try:
            await run_in_executor(
                partial(self._api.remove_container, container_name, force=True)
            )
        except NotFound:
            # Removed by someone else between inspect and remove
            pass
        logger.info(
            "Existing container removed",
            container_type=self.container_type,
            container_name=container_name,
        )

    async def _ensure_image(self) -> None:
        """Pull the configured image unless a local image carries its exact tag."""
        image_name = self._config.image_name
        images = await run_in_executor(self._api.images)
        if image_present(images, image_name):
            logger.debug("Image present locally", image=image_name)
            return

        timeout = (
            self._pull_timeout
            if self._pull_timeout is not None
            else settings.image_pull_timeout_seconds
        )
        logger.info("Image not found locally, pulling", image=image_name, timeout=timeout)
        await asyncio.wait_for(run_in_executor(self._pull_image, image_name), timeout=timeout)
        logger.info("Image pull completed", image=image_name)

    def _pull_image(self, image_name: str) -> None:
        """Pull ``image_name`` and drain the progress stream (blocking)."""
        repository, tag = split_image_reference(image_name)
        for progress in self._api.pull(repository, tag=tag, stream=True, decode=True):
            if "error" in progress:
                raise DockerException(
                    f"Image pull failed for {image_name}: {progress['error']}"
                )
            if "id" not in progress and progress.get("status"):
                logger.debug("Image pull progress", image=image_name, status=progress["status"])

    def _create_container(self) -> str:
        """Create the container from the definition (blocking)."""
        cfg = self._config
        host_config = self._api.create_host_config(
            port_bindings=build_port_bindings(cfg.ports) or None,
            binds=build_binds(cfg.volumes) or None,
        )
        response = self._api.create_container(
            image=cfg.image_name,
            name=cfg.container_name,
            ports=list(cfg.ports.keys()) or None,
            environment=dict(cfg.environment) or None,
            volumes=list(cfg.volumes.values()) or None,
            labels=self._labels(),
            command=cfg.command,
            entrypoint=cfg.entrypoint,
            host_config=host_config,
            detach=True,
        )
        return response["Id"]

    def _labels(self) -> Dict[str, str]:
        labels = dict(self._config.labels)
        labels[MANAGED_LABEL] = "true"
        labels[KEY_LABEL] = self.key
        return labels
