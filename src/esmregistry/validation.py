"""Syntax predicates for package scopes, names and versions.

All predicates accept any value and return a bool; absent or non-string
candidates are rejected rather than raising.
"""

from __future__ import annotations

import re
from typing import Any, Tuple

_SCOPE_PATTERN = re.compile(r"@[a-z]+")
_NAME_PATTERN = re.compile(r"[a-z-]+")
_VERSION_PATTERN = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


def _matches(pattern: re.Pattern, candidate: Any) -> bool:
    if not isinstance(candidate, str) or not candidate:
        return False
    return pattern.fullmatch(candidate) is not None


def is_valid_scope(scope: Any) -> bool:
    """Return True for scopes like ``@foo``."""
    return _matches(_SCOPE_PATTERN, scope)


def is_valid_name(name: Any) -> bool:
    """Return True for package names like ``left-pad``."""
    return _matches(_NAME_PATTERN, name)


def is_valid_version(version: Any) -> bool:
    """Return True for three-component numeric versions like ``1.2.3``."""
    return _matches(_VERSION_PATTERN, version)


def is_valid_identity(scope: Any, name: Any, version: Any = None) -> bool:
    """Validate a package identity; ``version`` is optional."""
    if not (is_valid_scope(scope) and is_valid_name(name)):
        return False
    return version is None or is_valid_version(version)


def version_key(version: str) -> Tuple[int, int, int]:
    """Numeric sort key for a valid version string."""
    major, minor, patch = version.split(".")
    return int(major), int(minor), int(patch)
