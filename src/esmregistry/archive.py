"""Archive packing and the on-disk artifact cache.

Cache entries are keyed by package identity, not content: once an archive for
``(scope, name, version)`` exists it is served as-is forever, even if the
source module later changes. Nothing here ever deletes a cache entry.
"""

from __future__ import annotations

import asyncio
import contextlib
import gzip
import io
import json
import logging
import os
import tarfile
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Iterable, Union

from .common.logging_utils import extra_context, is_debug_enabled
from .config import RegistryConfig
from .constants import Constants
from .dependencies import infer_dependencies
from .errors import CacheWriteError, ClientInputError, NotFoundError, ParseError
from .validation import is_valid_identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    """A single file inside an archive."""

    name: str
    content: Union[str, bytes]

    def data(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")


def pack_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    """Encode entries as a gzip-compressed tar stream.

    Timestamps and modes are fixed so the same entries always produce the
    same bytes.
    """
    buffer = io.BytesIO()
    with gzip.GzipFile(fileobj=buffer, mode="wb", mtime=0) as gz:
        with tarfile.open(fileobj=gz, mode="w", format=tarfile.USTAR_FORMAT) as tar:
            for entry in entries:
                data = entry.data()
                info = tarfile.TarInfo(entry.name)
                info.size = len(data)
                info.mode = 0o644
                info.mtime = Constants.ARCHIVE_MTIME
                tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def cache_key(scope: str, name: str, version: str) -> str:
    """Flat cache filename for a package version, e.g. ``@foo__bar-1.0.0``."""
    return f"{scope}__{name}-{version}"


def package_descriptor(scope: str, name: str, version: str, dependencies: Dict[str, str]) -> str:
    """Serialize the ``package.json`` shipped inside an archive."""
    return json.dumps({
        "name": f"{scope}/{name}",
        "version": version,
        "dependencies": dependencies,
        "exports": Constants.PACKAGE_EXPORTS,
    })


class ArtifactCache:
    """Builds package archives on first request and persists them.

    Concurrent requests for the same uncached key share a single build: the
    first caller builds under a per-key lock while the others wait and then
    find the finished file. Archives are written to a temporary file in the
    cache directory and renamed into place, so readers never observe a
    partially written entry.
    """

    def __init__(self, config: RegistryConfig):
        """Initialize the artifact cache.

        Args:
            config: Registry configuration providing store and cache roots.
        """
        self._config = config
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._hits = 0
        self._misses = 0
        self._builds = 0

    def path_for(self, scope: str, name: str, version: str) -> Path:
        """Location of the cached archive for a package version."""
        return self._config.cache_dir / cache_key(scope, name, version)

    def source_for(self, scope: str, name: str, version: str) -> Path:
        """Location of the source module for a package version."""
        return self._config.data_dir / scope / name / f"{version}{Constants.MODULE_EXTENSION}"

    async def get_or_build(self, scope: str, name: str, version: str) -> Path:
        """Return the cached archive path, building the archive if absent.

        Args:
            scope: Package scope, e.g. ``@foo``.
            name: Package name.
            version: Exact ``x.y.z`` version.

        Returns:
            Path to a complete archive file.

        Raises:
            ClientInputError: If the identity is malformed.
            NotFoundError: If the source module does not exist.
            ParseError: If the source module does not parse.
            CacheWriteError: If the archive could not be persisted.
        """
        if not is_valid_identity(scope, name, version):
            raise ClientInputError(f"Invalid package identity: {scope}/{name}@{version}")

        key = cache_key(scope, name, version)
        target = self.path_for(scope, name, version)
        if await asyncio.to_thread(target.is_file):
            self._hits += 1
            return target

        async with self._key_lock(key):
            # Another caller may have finished the build while we waited
            if await asyncio.to_thread(target.is_file):
                self._hits += 1
                return target
            self._misses += 1
            await asyncio.to_thread(self._build, scope, name, version, target)
            self._builds += 1

        return target

    @asynccontextmanager
    async def _key_lock(self, key: str) -> AsyncIterator[None]:
        """Hold the build lock for ``key``; unused locks are discarded."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                self._locks.pop(key, None)

    def _build(self, scope: str, name: str, version: str, target: Path) -> None:
        """Read the source, pack the archive and persist it atomically."""
        source = self.source_for(scope, name, version)
        if not source.is_file():
            raise NotFoundError(f"No module for {scope}/{name}@{version}")

        logger.info("Generating archive for %s/%s@%s", scope, name, version)
        try:
            content = source.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"{source} is not UTF-8 text") from e
        except OSError as e:
            raise NotFoundError(f"Cannot read {source}: {e}") from e

        dependencies = infer_dependencies(content)
        data = pack_archive([
            ArchiveEntry(Constants.PACKAGE_DESCRIPTOR,
                         package_descriptor(scope, name, version, dependencies)),
            ArchiveEntry(Constants.PACKAGE_ENTRY, content),
        ])
        self._write_atomic(target, data)

        if is_debug_enabled(logger):
            logger.debug(
                "Archive cached",
                extra=extra_context(
                    component="cache",
                    key=target.name,
                    size=len(data),
                    dependencies=len(dependencies),
                ),
            )

    @staticmethod
    def _write_atomic(target: Path, data: bytes) -> None:
        """Write ``data`` to ``target`` via a temp file and rename."""
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)
            raise CacheWriteError(f"Failed to write {target}: {e}") from e

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "hits": self._hits,
            "misses": self._misses,
            "builds": self._builds,
            "pending_keys": len(self._locks),
        }
