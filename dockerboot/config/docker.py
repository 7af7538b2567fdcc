"""Docker engine and managed container configuration.

The file format mirrors the ``docker`` block of a typical application
config::

    host: unix:///var/run/docker.sock
    tls-verify: false
    registry:
      url: https://index.docker.io/v1/
    containers:
      redis:
        container-name: my-redis
        image-name: redis:latest
        lifecycle-mode: START_AND_STOP
        ports:
          6379: 6379

Hyphenated keys are the canonical spelling; snake_case is accepted too.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..models.container import LifecycleMode

logger = structlog.get_logger(__name__)


class RegistryConfig(BaseModel):
    """Image registry endpoint and credentials."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(default="https://index.docker.io/v1/")
    username: Optional[str] = Field(default=None)
    password: Optional[str] = Field(default=None)


class ContainerConfig(BaseModel):
    """Static definition of one managed container."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    key: str = Field(default="", description="Lookup key, filled from the containers map")
    container_name: str = Field(..., alias="container-name", min_length=1)
    image_name: str = Field(..., alias="image-name", min_length=1)
    enabled: bool = Field(default=True)
    lifecycle_mode: LifecycleMode = Field(
        default=LifecycleMode.START_AND_STOP, alias="lifecycle-mode"
    )
    ports: Dict[int, int] = Field(default_factory=dict)
    environment: Dict[str, str] = Field(default_factory=dict)
    volumes: Dict[str, str] = Field(default_factory=dict)
    labels: Dict[str, str] = Field(default_factory=dict)
    command: Optional[List[str]] = Field(default=None)
    entrypoint: Optional[List[str]] = Field(default=None)

    @property
    def container_type(self) -> str:
        """Name used for this container in logs and errors."""
        return self.key or self.container_name


class DockerConfig(BaseModel):
    """Engine connection settings plus the containers to manage."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    host: str = Field(default="unix:///var/run/docker.sock")
    tls_verify: bool = Field(default=False, alias="tls-verify")
    cert_path: Optional[str] = Field(default=None, alias="cert-path")
    timeout: int = Field(default=60, ge=1, description="Engine HTTP timeout in seconds")
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    containers: Dict[str, ContainerConfig] = Field(default_factory=dict)

    @field_validator("containers")
    @classmethod
    def _assign_keys(cls, v):
        """Stamp each container definition with its map key."""
        return {key: container.model_copy(update={"key": key}) for key, container in v.items()}

    def enabled_containers(self) -> Dict[str, ContainerConfig]:
        """Definitions that should produce a live manager."""
        return {key: c for key, c in self.containers.items() if c.enabled}


def load_docker_config(path: Union[str, Path]) -> DockerConfig:
    """Load a :class:`DockerConfig` from a YAML file.

    A missing file is not an error: the application simply manages no
    containers. Malformed content raises ``ValueError``.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning("Docker config file not found", path=str(config_path))
        return DockerConfig()

    with open(config_path, "r") as f:
        raw: Any = yaml.safe_load(f)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid docker config in {config_path}: expected a mapping")

    # Accept both a bare file and one nested under a top-level "docker" key
    if "docker" in raw and isinstance(raw["docker"], dict):
        raw = raw["docker"]

    try:
        config = DockerConfig.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Invalid docker config in {config_path}: {e}") from e

    logger.info(
        "Loaded docker config",
        path=str(config_path),
        host=config.host,
        containers=list(config.containers.keys()),
        enabled=list(config.enabled_containers().keys()),
    )
    return config
