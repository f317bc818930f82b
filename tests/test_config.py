"""Tests for configuration loading."""

from types import SimpleNamespace

import pytest

from esmregistry.config import RegistryConfig, load_config_file
from esmregistry.errors import ConfigError


class TestRegistryConfig:
    """Tests for RegistryConfig."""

    def test_default_config(self):
        """Test default configuration values."""
        config = RegistryConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.scheme == "https"
        assert config.debug is False

    def test_from_env(self):
        environ = {
            "DATA_PATH": "/srv/modules",
            "CACHE_PATH": "/srv/cache",
            "DEBUG": "1",
            "ESMREGISTRY_PORT": "9000",
        }
        config = RegistryConfig.from_sources(environ=environ)
        assert config.data_path == "/srv/modules"
        assert config.cache_path == "/srv/cache"
        assert config.port == 9000
        assert config.debug is True

    def test_args_override_env(self):
        args = SimpleNamespace(
            CONFIG=None, DATA_PATH="/cli/data", CACHE_PATH=None,
            HOST="0.0.0.0", PORT=9100, SCHEME=None, DEBUG=False,
        )
        environ = {"DATA_PATH": "/env/data", "CACHE_PATH": "/env/cache"}
        config = RegistryConfig.from_sources(args, environ=environ)
        assert config.data_path == "/cli/data"
        assert config.cache_path == "/env/cache"
        assert config.host == "0.0.0.0"
        assert config.port == 9100

    def test_yaml_file_is_lowest_priority(self, tmp_path):
        config_file = tmp_path / "registry.yaml"
        config_file.write_text(
            "registry:\n"
            "  data_path: /yaml/data\n"
            "  cache_path: /yaml/cache\n"
            "  scheme: http\n"
        )
        args = SimpleNamespace(CONFIG=str(config_file))
        config = RegistryConfig.from_sources(args, environ={"CACHE_PATH": "/env/cache"})
        assert config.data_path == "/yaml/data"
        assert config.cache_path == "/env/cache"
        assert config.scheme == "http"

    def test_invalid_port(self):
        with pytest.raises(ConfigError):
            RegistryConfig.from_sources(environ={"ESMREGISTRY_PORT": "http"})

    def test_validate_requires_paths(self, tmp_path):
        with pytest.raises(ConfigError, match="DATA_PATH"):
            RegistryConfig(cache_path=str(tmp_path)).validate()
        with pytest.raises(ConfigError, match="CACHE_PATH"):
            RegistryConfig(data_path=str(tmp_path)).validate()

    def test_validate_requires_existing_directories(self, tmp_path):
        config = RegistryConfig(data_path=str(tmp_path / "missing"), cache_path=str(tmp_path))
        with pytest.raises(ConfigError):
            config.validate()

    def test_validate_accepts_existing_directories(self, config):
        config.validate()


class TestLoadConfigFile:
    """Tests for load_config_file."""

    def test_no_path(self):
        assert load_config_file(None) == {}

    def test_missing_file(self, tmp_path):
        assert load_config_file(str(tmp_path / "nope.yaml")) == {}

    def test_top_level_mapping(self, tmp_path):
        path = tmp_path / "c.yml"
        path.write_text("port: 9999\n")
        assert load_config_file(str(path)) == {"port": 9999}

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("registry: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config_file(str(path))
