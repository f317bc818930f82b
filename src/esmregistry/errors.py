"""Exception hierarchy for the registry core.

Errors are raised where the failure happens and translated to HTTP status
codes only by the server.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for all registry errors."""


class ClientInputError(RegistryError):
    """Malformed scope, name or version in a request."""


class NotFoundError(RegistryError):
    """Well-formed identity with no matching module in the store."""


class ParseError(RegistryError):
    """Module source could not be parsed as an ES module."""


class CacheWriteError(RegistryError):
    """Persisting an archive into the cache store failed."""


class ConfigError(RegistryError):
    """Startup configuration is missing or unusable."""
