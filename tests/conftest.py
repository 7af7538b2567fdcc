"""Pytest configuration and shared fixtures."""

import itertools
import threading
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
from docker.errors import APIError, NotFound

from dockerboot.config.docker import ContainerConfig, DockerConfig
from dockerboot.core.events import EventBus
from dockerboot.models.container import LifecycleMode
from dockerboot.services.container import ContainerManager


class FakeDockerAPI:
    """In-memory stand-in for ``docker.APIClient``.

    Tracks containers by id and name, and local images by repo tags. Every
    call is appended to ``calls`` as ``(method, argument)``. Calls arrive
    from executor threads, so engine state is guarded by one lock.
    """

    def __init__(self, images: Optional[List[List[str]]] = None):
        self.containers: Dict[str, Dict] = {}
        self.image_list = [{"RepoTags": tags} for tags in (images or [])]
        self.pulled: List[tuple] = []
        self.created: List[Dict] = []
        self.calls: List[tuple] = []
        self.pull_error: Optional[Exception] = None
        self.pull_stream_error: Optional[str] = None
        self.start_error: Optional[Exception] = None
        self.stop_error: Optional[Exception] = None
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    # Helpers ---------------------------------------------------------------

    def add_container(self, name: str, status: str = "running") -> str:
        with self._lock:
            container_id = f"{next(self._ids):064x}"
            self.containers[container_id] = {"Name": name, "Status": status}
            return container_id

    def named(self, name: str) -> List[str]:
        with self._lock:
            return [cid for cid, c in self.containers.items() if c["Name"] == name]

    def status_of(self, name: str) -> Optional[str]:
        with self._lock:
            ids = self.named(name)
            return self.containers[ids[0]]["Status"] if ids else None

    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]

    def _find(self, ref: str) -> str:
        if ref in self.containers:
            return ref
        for container_id, container in self.containers.items():
            if container["Name"] == ref:
                return container_id
        raise NotFound(f"No such container: {ref}")

    # docker.APIClient surface ---------------------------------------------

    def inspect_container(self, container: str) -> Dict:
        with self._lock:
            self.calls.append(("inspect_container", container))
            container_id = self._find(container)
            data = self.containers[container_id]
            return {
                "Id": container_id,
                "Name": "/" + data["Name"],
                "State": {"Status": data["Status"]},
            }

    def remove_container(self, container: str, force: bool = False) -> None:
        with self._lock:
            self.calls.append(("remove_container", container))
            container_id = self._find(container)
            if self.containers[container_id]["Status"] == "running" and not force:
                raise APIError(f"You cannot remove a running container {container_id}")
            del self.containers[container_id]

    def images(self) -> List[Dict]:
        with self._lock:
            self.calls.append(("images", None))
            return list(self.image_list)

    def pull(self, repository: str, tag: str = None, stream: bool = False, decode: bool = False):
        with self._lock:
            self.calls.append(("pull", f"{repository}:{tag}"))
            if self.pull_error is not None:
                raise self.pull_error
            self.pulled.append((repository, tag))
            events = [{"status": f"Pulling from {repository}", "id": tag}]
            if self.pull_stream_error is not None:
                events.append({"error": self.pull_stream_error})
            else:
                self.image_list.append({"RepoTags": [f"{repository}:{tag}"]})
                events.append({"status": f"Status: Downloaded newer image for {repository}:{tag}"})
            return iter(events)

    def create_host_config(self, **kwargs) -> Dict:
        return dict(kwargs)

    def create_container(self, image: str, name: str = None, **kwargs) -> Dict:
        with self._lock:
            self.calls.append(("create_container", name))
            if self.named(name):
                raise APIError(f"Conflict. The container name /{name} is already in use")
            container_id = self.add_container(name, status="created")
            self.created.append({"image": image, "name": name, **kwargs})
            return {"Id": container_id}

    def start(self, container: str) -> None:
        with self._lock:
            self.calls.append(("start", container))
            if self.start_error is not None:
                raise self.start_error
            self.containers[self._find(container)]["Status"] = "running"

    def stop(self, container: str, timeout: int = None) -> None:
        with self._lock:
            self.calls.append(("stop", container))
            if self.stop_error is not None:
                raise self.stop_error
            self.containers[self._find(container)]["Status"] = "exited"


@pytest.fixture
def fake_api():
    """Empty fake engine."""
    return FakeDockerAPI()


@pytest.fixture
def mock_docker_client(fake_api):
    """Mock DockerClient exposing the fake engine as ``.api``."""
    client = MagicMock()
    client.api = fake_api
    return client


def make_container_config(
    key: str = "redis",
    container_name: str = "my-redis",
    image_name: str = "redis:latest",
    lifecycle_mode: LifecycleMode = LifecycleMode.START_AND_STOP,
    **kwargs,
) -> ContainerConfig:
    return ContainerConfig(
        key=key,
        container_name=container_name,
        image_name=image_name,
        lifecycle_mode=lifecycle_mode,
        **kwargs,
    )


@pytest.fixture
def redis_config():
    """The canonical redis definition."""
    return make_container_config(ports={6379: 6379})


@pytest.fixture
def manager(redis_config, mock_docker_client):
    """ContainerManager for redis against the fake engine."""
    return ContainerManager(redis_config, mock_docker_client, pull_timeout=5, stop_timeout=1)


@pytest.fixture
def bus():
    """Isolated event bus."""
    return EventBus()


@pytest.fixture
def docker_config():
    """Config with three containers, one disabled."""
    return DockerConfig.model_validate(
        {
            "containers": {
                "redis": {
                    "container-name": "my-redis",
                    "image-name": "redis:latest",
                    "ports": {6379: 6379},
                },
                "postgres": {
                    "container-name": "my-postgres",
                    "image-name": "postgres:16",
                    "lifecycle-mode": "START_ONLY",
                    "environment": {"POSTGRES_PASSWORD": "secret"},
                },
                "mongo": {
                    "container-name": "my-mongo",
                    "image-name": "mongo:7",
                    "enabled": False,
                },
            }
        }
    )


@pytest.fixture
def config_factory():
    """Build ContainerConfig objects with redis defaults."""
    return make_container_config


@pytest.fixture
def client_factory():
    """Build a mock DockerClient around a fresh fake engine."""

    def _factory(images: Optional[List[List[str]]] = None) -> MagicMock:
        client = MagicMock()
        client.api = FakeDockerAPI(images=images)
        return client

    return _factory
