"""Dependency inference from ES module import declarations."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Tuple

import tree_sitter_javascript
from tree_sitter import Language, Node, Parser

from .constants import Constants
from .errors import ParseError

logger = logging.getLogger(__name__)

JS_LANGUAGE = Language(tree_sitter_javascript.language())


def _import_source(node: Node) -> Optional[str]:
    """Return the unquoted module specifier of an ``import_statement``."""
    source = node.child_by_field_name("source")
    if source is None:
        source = next((c for c in node.children if c.type == "string"), None)
    if source is None or source.text is None:
        return None
    return source.text.decode("utf-8")[1:-1]


def extract_imports(source: str) -> Iterator[str]:
    """Yield the specifiers of top-level ``import`` declarations.

    Args:
        source: ES module source text.

    Yields:
        Module specifiers in declaration order.

    Raises:
        ParseError: If ``source`` is not a syntactically valid module.
    """
    tree = Parser(JS_LANGUAGE).parse(source.encode("utf-8"))
    root = tree.root_node
    if root.has_error:
        raise ParseError("Invalid module source")

    for node in root.children:
        if node.type == "import_statement":
            specifier = _import_source(node)
            if specifier is not None:
                yield specifier


def split_specifier(specifier: str) -> Tuple[str, str]:
    """Split an import specifier into (package name, version tag).

    A version may be embedded after an ``@`` that follows the leading
    character, so ``@scope/dep@1.2.3`` -> ``("@scope/dep", "1.2.3")`` and
    ``lib@2.0.0`` -> ``("lib", "2.0.0")``. Anything else maps to ``latest``.
    """
    head, rest = specifier[:1], specifier[1:]
    if "@" in rest:
        parts = rest.split("@")
        return head + parts[0], parts[1]
    return specifier, Constants.LATEST_TAG


def is_builtin(specifier: str) -> bool:
    """Return True for host built-ins such as ``node:fs``."""
    return specifier.startswith(Constants.BUILTIN_PREFIXES)


def infer_dependencies(source: str) -> Dict[str, str]:
    """Map a module's imports to a ``{name: version-tag}`` dependency table.

    Raises:
        ParseError: If the source does not parse.
    """
    dependencies: Dict[str, str] = {}
    for specifier in extract_imports(source):
        if is_builtin(specifier):
            continue
        name, tag = split_specifier(specifier)
        dependencies[name] = tag
    logger.debug("Inferred %d dependencies", len(dependencies))
    return dependencies
