"""Runtime configuration for the registry server.

Settings are resolved once at startup in priority order (highest first):
  1. CLI flags
  2. Environment variables (DATA_PATH, CACHE_PATH, DEBUG, ESMREGISTRY_*)
  3. YAML config file given with --config (``registry:`` section or top level)
  4. Hardcoded defaults

The resulting RegistryConfig is passed explicitly to the server, the manifest
builder and the artifact cache.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .constants import Constants
from .errors import ConfigError

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load registry settings from a YAML file.

    Args:
        config_path: Path to a YAML (or JSON) file, or None.

    Returns:
        Settings dict; empty when no path is given or the file is missing.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config {config_path}: {e}") from e

    if not isinstance(data, dict):
        return {}
    section = data.get("registry", data)
    return section if isinstance(section, dict) else {}


@dataclass
class RegistryConfig:
    """Configuration shared by the server, manifest builder and cache."""

    data_path: str = ""
    cache_path: str = ""
    host: str = Constants.DEFAULT_HOST
    port: int = Constants.DEFAULT_PORT
    scheme: str = Constants.DEFAULT_SCHEME
    debug: bool = False

    @property
    def data_dir(self) -> Path:
        """Root of the read-only module store."""
        return Path(self.data_path)

    @property
    def cache_dir(self) -> Path:
        """Flat directory holding cached archives."""
        return Path(self.cache_path)

    @classmethod
    def from_sources(
        cls,
        args: Any = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "RegistryConfig":
        """Build a config from file, environment and CLI arguments.

        Args:
            args: Parsed CLI arguments namespace, or None.
            environ: Environment mapping; defaults to ``os.environ``.

        Returns:
            RegistryConfig instance (not yet validated).
        """
        config = cls()
        config.apply_mapping(load_config_file(getattr(args, "CONFIG", None)))
        config.apply_env(os.environ if environ is None else environ)
        if args is not None:
            config.apply_args(args)
        return config

    def apply_mapping(self, data: Mapping[str, Any]) -> None:
        """Apply settings from a config-file mapping, ignoring unknown keys."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            key = str(key).replace("-", "_")
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            self._set(key, value)

    def apply_env(self, environ: Mapping[str, str]) -> None:
        """Apply settings from environment variables."""
        env_map = {
            Constants.ENV_DATA_PATH: "data_path",
            Constants.ENV_CACHE_PATH: "cache_path",
            Constants.ENV_HOST: "host",
            Constants.ENV_PORT: "port",
            Constants.ENV_SCHEME: "scheme",
        }
        for env_name, key in env_map.items():
            value = environ.get(env_name)
            if value:
                self._set(key, value)
        if environ.get(Constants.ENV_DEBUG):
            self.debug = environ[Constants.ENV_DEBUG].strip().lower() in _TRUTHY

    def apply_args(self, args: Any) -> None:
        """Apply CLI overrides; unset flags leave the current value alone."""
        arg_map = {
            "DATA_PATH": "data_path",
            "CACHE_PATH": "cache_path",
            "HOST": "host",
            "PORT": "port",
            "SCHEME": "scheme",
        }
        for attr, key in arg_map.items():
            value = getattr(args, attr, None)
            if value is not None:
                self._set(key, value)
        if getattr(args, "DEBUG", False):
            self.debug = True

    def _set(self, key: str, value: Any) -> None:
        if key == "port":
            try:
                value = int(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid port: {value!r}") from e
        elif key == "debug":
            value = value if isinstance(value, bool) else str(value).lower() in _TRUTHY
        else:
            value = str(value)
        setattr(self, key, value)

    def validate(self) -> None:
        """Check that both store directories are configured and exist.

        Raises:
            ConfigError: On a missing path, a path that is not a directory,
                or an unsupported URL scheme.
        """
        if not self.data_path:
            raise ConfigError(f"{Constants.ENV_DATA_PATH} must be defined")
        if not self.cache_path:
            raise ConfigError(f"{Constants.ENV_CACHE_PATH} must be defined")
        if not self.data_dir.is_dir():
            raise ConfigError(f"Module store is not a directory: {self.data_path}")
        if not self.cache_dir.is_dir():
            raise ConfigError(f"Cache store is not a directory: {self.cache_path}")
        if self.scheme not in ("http", "https"):
            raise ConfigError(f"Unsupported scheme: {self.scheme}")
