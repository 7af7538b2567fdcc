"""Contract shared by every managed resource."""

from abc import ABC, abstractmethod


class ResourceManager(ABC):
    """Lifecycle operations of an engine-managed resource.

    ``stop`` and ``remove`` take the resource id explicitly; callers that
    act on "their" resource pass the id they track.
    """

    @abstractmethod
    async def create_and_start(self) -> str:
        """Create the resource, start it, and return its id."""

    @abstractmethod
    async def stop(self, resource_id: str) -> None:
        """Gracefully stop the resource identified by ``resource_id``."""

    @abstractmethod
    async def remove(self, resource_id: str) -> None:
        """Permanently delete the resource identified by ``resource_id``."""
