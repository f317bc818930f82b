"""Read-only npm-compatible registry for single-file ES modules.

Manifests are synthesized from a flat module store on every request, and
package archives are built on first download and cached on disk.
"""

from .archive import ArchiveEntry, ArtifactCache, cache_key, pack_archive
from .config import RegistryConfig
from .dependencies import extract_imports, infer_dependencies, split_specifier
from .errors import (
    CacheWriteError,
    ClientInputError,
    ConfigError,
    NotFoundError,
    ParseError,
    RegistryError,
)
from .manifest import ManifestBuilder
from .request_parser import ParsedRequest, RequestKind, RequestParser
from .server import RegistryServer
from .validation import is_valid_name, is_valid_scope, is_valid_version

__all__ = [
    "ArchiveEntry",
    "ArtifactCache",
    "cache_key",
    "pack_archive",
    "RegistryConfig",
    "extract_imports",
    "infer_dependencies",
    "split_specifier",
    "CacheWriteError",
    "ClientInputError",
    "ConfigError",
    "NotFoundError",
    "ParseError",
    "RegistryError",
    "ManifestBuilder",
    "ParsedRequest",
    "RequestKind",
    "RequestParser",
    "RegistryServer",
    "is_valid_name",
    "is_valid_scope",
    "is_valid_version",
]
