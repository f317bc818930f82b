"""CLI entry point for the registry server."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, List, Optional

from .args import parse_args
from .common.logging_utils import configure_logging
from .config import RegistryConfig
from .constants import Constants, ExitCodes
from .errors import ConfigError
from .server import run_server_sync

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    if getattr(args, "DEBUG", False):
        os.environ[Constants.ENV_LOG_LEVEL] = "DEBUG"

    configure_logging()

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def load_config(args: Any) -> RegistryConfig:
    """Resolve and validate the startup configuration.

    Raises:
        ConfigError: If the module store or cache store is unusable.
    """
    config = RegistryConfig.from_sources(args)
    config.validate()
    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    return config


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``esm-registry`` command."""
    args = parse_args(argv)
    _setup_logging(args)

    try:
        config = load_config(args)
    except ConfigError as e:
        sys.stderr.write(f"ERROR: {e}\n")
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    print(
        f"\n"
        f"  ESM Registry\n"
        f"  ============\n"
        f"  Listening: http://{config.host}:{config.port}\n"
        f"  Modules:   {config.data_path}\n"
        f"  Cache:     {config.cache_path}\n"
        f"\n"
        f"  Configure npm for a scope:\n"
        f"    npm config set @scope:registry http://{config.host}:{config.port}\n"
        f"\n"
        f"  Press Ctrl+C to stop\n"
    )

    run_server_sync(config)


if __name__ == "__main__":
    main()
