"""Unit tests for configuration loading."""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from dockerboot.config import Settings
from dockerboot.config.docker import DockerConfig, load_docker_config
from dockerboot.models.container import LifecycleMode
from dockerboot.services.container import DockerClientFactory


DOCKER_YML = """
docker:
  host: tcp://docker.internal:2376
  tls-verify: false
  registry:
    url: https://registry.example.com
  containers:
    redis:
      container-name: my-redis
      image-name: redis:latest
      ports:
        6379: 6379
    postgres:
      container-name: my-postgres
      image-name: postgres:16
      lifecycle-mode: START_ONLY
      environment:
        POSTGRES_PASSWORD: secret
      volumes:
        /srv/pg: /var/lib/postgresql/data
    mongo:
      container-name: my-mongo
      image-name: mongo:7
      lifecycle-mode: NONE
      enabled: false
"""


class TestLoadDockerConfig:
    """Test reading the container definitions file."""

    def test_hyphenated_keys(self, tmp_path):
        path = tmp_path / "docker.yml"
        path.write_text(DOCKER_YML)

        config = load_docker_config(path)

        assert config.host == "tcp://docker.internal:2376"
        assert config.registry.url == "https://registry.example.com"
        redis = config.containers["redis"]
        assert redis.key == "redis"
        assert redis.container_name == "my-redis"
        assert redis.image_name == "redis:latest"
        assert redis.lifecycle_mode == LifecycleMode.START_AND_STOP
        assert redis.ports == {6379: 6379}
        postgres = config.containers["postgres"]
        assert postgres.lifecycle_mode == LifecycleMode.START_ONLY
        assert postgres.environment == {"POSTGRES_PASSWORD": "secret"}
        assert postgres.volumes == {"/srv/pg": "/var/lib/postgresql/data"}

    def test_disabled_entries_filtered(self, tmp_path):
        path = tmp_path / "docker.yml"
        path.write_text(DOCKER_YML)

        config = load_docker_config(path)

        assert set(config.containers) == {"redis", "postgres", "mongo"}
        assert set(config.enabled_containers()) == {"redis", "postgres"}

    def test_unnested_file(self, tmp_path):
        path = tmp_path / "docker.yml"
        path.write_text(
            "containers:\n"
            "  cache:\n"
            "    container_name: cache\n"
            "    image_name: memcached:1.6\n"
        )

        config = load_docker_config(path)

        assert config.host == "unix:///var/run/docker.sock"
        assert config.containers["cache"].image_name == "memcached:1.6"

    def test_missing_file(self, tmp_path):
        config = load_docker_config(tmp_path / "absent.yml")

        assert config.containers == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "docker.yml"
        path.write_text("")

        assert load_docker_config(path).containers == {}

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "docker.yml"
        path.write_text("- redis\n- postgres\n")

        with pytest.raises(ValueError):
            load_docker_config(path)

    def test_invalid_lifecycle_mode(self, tmp_path):
        path = tmp_path / "docker.yml"
        path.write_text(
            "containers:\n"
            "  redis:\n"
            "    container-name: my-redis\n"
            "    image-name: redis:latest\n"
            "    lifecycle-mode: SOMETIMES\n"
        )

        with pytest.raises(ValueError, match="lifecycle"):
            load_docker_config(path)

    def test_missing_image_name(self, tmp_path):
        path = tmp_path / "docker.yml"
        path.write_text("containers:\n  redis:\n    container-name: my-redis\n")

        with pytest.raises(ValueError):
            load_docker_config(path)


class TestContainerConfig:
    """Test container definition defaults."""

    def test_defaults(self):
        config = DockerConfig.model_validate(
            {"containers": {"redis": {"container-name": "my-redis", "image-name": "redis"}}}
        )
        redis = config.containers["redis"]

        assert redis.enabled is True
        assert redis.lifecycle_mode == LifecycleMode.START_AND_STOP
        assert redis.ports == {}
        assert redis.command is None
        assert redis.container_type == "redis"

    def test_frozen(self, redis_config):
        with pytest.raises(ValidationError):
            redis_config.image_name = "redis:7"


class TestDockerClientFactory:
    """Test client construction."""

    def test_plain_connection(self):
        config = DockerConfig(host="tcp://localhost:2375", timeout=30)

        with patch("dockerboot.services.container.client.docker.DockerClient") as client_cls:
            client = DockerClientFactory(config).create()

        client_cls.assert_called_once_with(base_url="tcp://localhost:2375", tls=False, timeout=30)
        client.login.assert_not_called()

    def test_registry_login(self):
        config = DockerConfig.model_validate(
            {"registry": {"url": "https://registry.example.com", "username": "ci", "password": "pw"}}
        )

        with patch("dockerboot.services.container.client.docker.DockerClient") as client_cls:
            DockerClientFactory(config).create()

        client_cls.return_value.login.assert_called_once_with(
            username="ci", password="pw", registry="https://registry.example.com"
        )

    def test_tls_with_cert_path(self, tmp_path):
        for name in ("cert.pem", "key.pem", "ca.pem"):
            (tmp_path / name).write_text("dummy")
        config = DockerConfig.model_validate({"tls-verify": True, "cert-path": str(tmp_path)})

        with patch("dockerboot.services.container.client.docker.DockerClient") as client_cls:
            DockerClientFactory(config).create()

        tls = client_cls.call_args.kwargs["tls"]
        assert tls.verify is True
        assert tls.ca_cert == str(tmp_path / "ca.pem")
        assert tls.cert == (str(tmp_path / "cert.pem"), str(tmp_path / "key.pem"))


class TestSettings:
    """Test application settings validation."""

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            Settings(log_level="loud")

    def test_invalid_log_format(self):
        with pytest.raises(ValueError):
            Settings(log_format="xml")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("DOCKER_CONFIG_FILE", "/etc/dockerboot/docker.yml")
        monkeypatch.setenv("STOP_TIMEOUT_SECONDS", "3")

        settings = Settings()

        assert settings.docker_config_file == "/etc/dockerboot/docker.yml"
        assert settings.stop_timeout_seconds == 3

    def test_api_key_auto_generated(self, monkeypatch):
        monkeypatch.delenv("API_KEY", raising=False)

        assert len(Settings().api_key) >= 16

    def test_api_key_too_short(self):
        with pytest.raises(ValueError):
            Settings(api_key="short")
