"""Centralized logging setup and structured-context helpers."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from ..constants import Constants

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def configure_logging() -> None:
    """Configure the root logger from the environment.

    ``ESMREGISTRY_LOG_LEVEL`` selects the level (default INFO); a truthy
    ``DEBUG`` variable forces DEBUG. Calling this more than once replaces the
    handler installed by the previous call instead of stacking a new one.
    """
    level_name = os.environ.get(Constants.ENV_LOG_LEVEL, "INFO").upper()
    if _env_flag(Constants.ENV_DEBUG):
        level_name = "DEBUG"
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_esmregistry", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler._esmregistry = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when ``logger`` would emit DEBUG records."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured debug records.

    None values are dropped so records only carry fields that were set.
    """
    return {k: v for k, v in fields.items() if v is not None}
