"""Docker client factory."""

import os
from typing import Optional

import docker
import structlog
from docker.tls import TLSConfig

from ...config.docker import DockerConfig

logger = structlog.get_logger(__name__)


class DockerClientFactory:
    """Builds a configured ``docker.DockerClient`` from a :class:`DockerConfig`."""

    def __init__(self, config: DockerConfig):
        self._config = config

    def _tls_config(self) -> Optional[TLSConfig]:
        if not self._config.tls_verify:
            return None

        cert_path = self._config.cert_path or os.environ.get("DOCKER_CERT_PATH")
        if not cert_path:
            # Verify against the system CA bundle without a client certificate
            return TLSConfig(verify=True)

        return TLSConfig(
            client_cert=(
                os.path.join(cert_path, "cert.pem"),
                os.path.join(cert_path, "key.pem"),
            ),
            ca_cert=os.path.join(cert_path, "ca.pem"),
            verify=True,
        )

    def create(self) -> docker.DockerClient:
        """Create the client and log in to the configured registry."""
        logger.info(
            "Configuring Docker client",
            host=self._config.host,
            tls_verify=self._config.tls_verify,
        )

        client = docker.DockerClient(
            base_url=self._config.host,
            tls=self._tls_config() or False,
            timeout=self._config.timeout,
        )

        registry = self._config.registry
        if registry.username:
            client.login(
                username=registry.username,
                password=registry.password,
                registry=registry.url,
            )
            logger.info("Logged in to registry", registry=registry.url)

        return client
