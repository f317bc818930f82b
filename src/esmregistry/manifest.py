"""Registry manifest synthesis from a package's version directory."""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .common.logging_utils import extra_context, is_debug_enabled
from .config import RegistryConfig
from .constants import Constants
from .dependencies import infer_dependencies
from .errors import NotFoundError, ParseError
from .validation import is_valid_identity, is_valid_version, version_key

logger = logging.getLogger(__name__)


def format_timestamp(epoch: float) -> str:
    """Format a POSIX timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    moment = datetime.fromtimestamp(epoch, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def tarball_url(base_url: str, scope: str, name: str, version: str) -> str:
    """Download URL for one version's archive."""
    return f"{base_url.rstrip('/')}/{scope}/{name}/{version}{Constants.TARBALL_EXTENSION}"


class ManifestBuilder:
    """Builds npm-style package manifests straight from the module store.

    Nothing is cached: every call rescans the directory and re-parses every
    version, so the manifest always reflects the current store.
    """

    def __init__(self, config: RegistryConfig):
        """Initialize the builder.

        Args:
            config: Registry configuration providing the module store root.
        """
        self._config = config

    def package_dir(self, scope: str, name: str) -> Path:
        """Directory holding the versions of ``scope/name``."""
        return self._config.data_dir / scope / name

    def list_versions(self, scope: str, name: str) -> Optional[List[str]]:
        """Return the valid versions of a package in ascending order.

        Returns:
            Sorted version list (possibly empty), or None if the package
            directory does not exist.
        """
        folder = self.package_dir(scope, name)
        if not folder.is_dir():
            return None

        versions = []
        with os.scandir(folder) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                stem, ext = os.path.splitext(entry.name)
                if ext == Constants.MODULE_EXTENSION and is_valid_version(stem):
                    versions.append(stem)
        return sorted(versions, key=version_key)

    async def build(self, scope: str, name: str, base_url: str) -> Optional[Dict[str, Any]]:
        """Build the manifest without blocking the event loop.

        Args:
            scope: Package scope, e.g. ``@foo``.
            name: Package name.
            base_url: ``scheme://host`` prefix for tarball URLs.

        Returns:
            Manifest dict, or None if the package has no valid versions.

        Raises:
            ParseError: If any version's source fails to parse.
            NotFoundError: If a source file cannot be read.
        """
        return await asyncio.to_thread(self.build_sync, scope, name, base_url)

    def build_sync(self, scope: str, name: str, base_url: str) -> Optional[Dict[str, Any]]:
        """Synchronous body of :meth:`build`."""
        if not is_valid_identity(scope, name):
            return None

        try:
            versions = self.list_versions(scope, name)
        except OSError as e:
            raise NotFoundError(f"Cannot list {scope}/{name}: {e}") from e
        if not versions:
            return None

        package_name = f"{scope}/{name}"
        folder = self.package_dir(scope, name)
        records: Dict[str, Dict[str, Any]] = {}
        times: Dict[str, str] = {}

        for version in versions:
            source_file = folder / f"{version}{Constants.MODULE_EXTENSION}"
            try:
                times[version] = format_timestamp(source_file.stat().st_ctime)
                content = source_file.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise ParseError(f"{source_file} is not UTF-8 text") from e
            except OSError as e:
                raise NotFoundError(f"Cannot read {source_file}: {e}") from e

            records[version] = {
                "name": package_name,
                "version": version,
                "description": "",
                "dist": {"tarball": tarball_url(base_url, scope, name, version)},
                "dependencies": infer_dependencies(content),
            }

        latest = versions[-1]
        if is_debug_enabled(logger):
            logger.debug(
                "Built manifest",
                extra=extra_context(
                    component="manifest",
                    package=package_name,
                    count=len(versions),
                    latest=latest,
                ),
            )

        return {
            "name": package_name,
            "description": "",
            "dist-tags": {Constants.LATEST_TAG: latest},
            "versions": records,
            "time": {
                "created": times[versions[0]],
                "modified": times[latest],
                **times,
            },
        }
