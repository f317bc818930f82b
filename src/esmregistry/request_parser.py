"""Request parser for extracting package identity from registry URLs."""

from __future__ import annotations

import os
import urllib.parse
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .validation import is_valid_identity


class RequestKind(Enum):
    """What a request path asks for."""

    MANIFEST = "manifest"
    TARBALL = "tarball"
    INVALID = "invalid"


@dataclass
class ParsedRequest:
    """Result of parsing a registry request."""

    kind: RequestKind
    scope: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    raw_path: str = ""

    @property
    def package_name(self) -> str:
        return f"{self.scope}/{self.name}"

    @property
    def is_valid(self) -> bool:
        """True when the path shape and every component are well formed."""
        if self.kind == RequestKind.INVALID:
            return False
        if self.kind == RequestKind.TARBALL and self.version is None:
            return False
        return is_valid_identity(self.scope, self.name, self.version)


class RequestParser:
    """Parser for registry request paths.

    Two shapes are understood:

    - ``/@scope%2fname`` (or ``/@scope/name``) - package manifest
    - ``/@scope/name/{version}.tgz`` - package archive
    """

    def parse(self, raw_path: str) -> ParsedRequest:
        """Parse a raw (still percent-encoded) request path.

        Args:
            raw_path: The URL path as received.

        Returns:
            ParsedRequest; ``kind`` is INVALID when the segment count is wrong.
        """
        path = urllib.parse.unquote(raw_path)
        parts = path[1:].split("/") if path.startswith("/") else path.split("/")

        if len(parts) < 2 or len(parts) > 3:
            return ParsedRequest(kind=RequestKind.INVALID, raw_path=path)

        scope, name = parts[0], parts[1]
        if len(parts) == 2 or not parts[2]:
            return ParsedRequest(
                kind=RequestKind.MANIFEST,
                scope=scope,
                name=name,
                raw_path=path,
            )

        version, _ = os.path.splitext(parts[2])
        return ParsedRequest(
            kind=RequestKind.TARBALL,
            scope=scope,
            name=name,
            version=version,
            raw_path=path,
        )
