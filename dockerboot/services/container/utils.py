"""Shared utilities for container operations."""

import asyncio
from typing import Any, Dict, List, Optional

import requests
from docker.errors import APIError, DockerException, NotFound

from ...models.errors import ErrorType


async def run_in_executor(func, *args):
    """
    Run a blocking function in the default thread pool executor.

    Args:
        func: Blocking function to run
        *args: Arguments to pass to the function

    Returns:
        Result of the function
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


def classify_error(error: BaseException) -> ErrorType:
    """Map an engine-side exception to an :class:`ErrorType`."""
    if isinstance(error, NotFound):
        return ErrorType.RESOURCE_NOT_FOUND
    if isinstance(error, (asyncio.TimeoutError, TimeoutError, requests.exceptions.Timeout)):
        return ErrorType.TIMEOUT
    if isinstance(error, APIError):
        status = error.status_code
        if status == 409:
            return ErrorType.RESOURCE_CONFLICT
        if status in (401, 403):
            return ErrorType.AUTHORIZATION
        if status == 404:
            return ErrorType.RESOURCE_NOT_FOUND
        return ErrorType.EXTERNAL_SERVICE
    if isinstance(error, (requests.exceptions.ConnectionError, DockerException)):
        return ErrorType.EXTERNAL_SERVICE
    return ErrorType.INTERNAL_SERVER


def image_present(images: List[Dict[str, Any]], reference: str) -> bool:
    """Whether ``reference`` matches a repo tag of any local image exactly."""
    for image in images:
        repo_tags = image.get("RepoTags") or []
        if reference in repo_tags:
            return True
    return False


def split_image_reference(reference: str) -> tuple:
    """Split ``repository[:tag]`` into ``(repository, tag)``.

    A colon that belongs to a registry port (``host:5000/repo``) is not a
    tag separator. Digest references are returned whole with no tag.
    """
    if "@" in reference:
        return reference, None
    name, sep, tag = reference.rpartition(":")
    if not sep or "/" in tag:
        return reference, "latest"
    return name, tag


def build_port_bindings(ports: Dict[int, int]) -> Dict[int, int]:
    """Container-port to host-port bindings for ``create_host_config``."""
    return {int(container_port): int(host_port) for container_port, host_port in ports.items()}


def build_binds(volumes: Dict[str, str]) -> List[str]:
    """``host:container:rw`` bind strings for ``create_host_config``."""
    return [f"{host_path}:{container_path}:rw" for host_path, container_path in volumes.items()]


def container_state(inspect_data: Optional[Dict[str, Any]]) -> Optional[str]:
    """Extract ``State.Status`` from an inspect payload."""
    if not inspect_data:
        return None
    return (inspect_data.get("State") or {}).get("Status")
