# src/extraction/reference_finder.py — v1
"""Find SVG <img> references in a document tree and group them by file.

Both steps are pure: no filesystem access and no tree mutation.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

from bs4.element import Tag

from svginline.core.errors import PathResolutionError
from svginline.core.models import AssetIdentity

logger = logging.getLogger(__name__)

SVG_EXTENSION = ".svg"
REFERENCE_TAG = "img"
TARGET_ATTRIBUTE = "src"

# Remote and inline sources are never read from disk
_URL_PATTERN = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.-]*:|//)")

ReferenceGroups = dict[AssetIdentity, list[Tag]]


def is_svg_reference(node: object) -> bool:
    """True if ``node`` is an <img> whose src points at a local SVG file."""
    if not isinstance(node, Tag) or node.name != REFERENCE_TAG:
        return False
    src = node.get(TARGET_ATTRIBUTE)
    if not isinstance(src, str) or not src.lower().endswith(SVG_EXTENSION):
        return False
    if _URL_PATTERN.match(src) and not _is_windows_drive(src):
        logger.debug("Ignoring remote SVG reference: %s", src)
        return False
    return True


def _is_windows_drive(src: str) -> bool:
    return len(src) > 2 and src[1] == ":" and src[2] in "\\/" and src[0].isalpha()


def find_svg_references(tree: Tag) -> list[Tag]:
    """Collect SVG <img> nodes in document order (depth-first, pre-order).

    Uses an explicit stack, so nesting depth is not limited by the
    interpreter's recursion limit.
    """
    found: list[Tag] = []
    stack: list[Tag] = [tree]
    while stack:
        node = stack.pop()
        if is_svg_reference(node):
            found.append(node)
        children = [child for child in node.children if isinstance(child, Tag)]
        stack.extend(reversed(children))
    return found


def resolve_asset_path(src: str, base_dir: str | Path) -> AssetIdentity:
    """Resolve an <img> src against the document directory.

    Pure string normalization; symlinks are not followed.
    """
    return os.path.normpath(os.path.abspath(os.path.join(os.fspath(base_dir), src)))


def group_references(
    references: Iterable[Tag], document_path: str | Path | None
) -> ReferenceGroups:
    """Group reference nodes by the absolute path of the file they point at.

    Args:
        references: Nodes returned by find_svg_references().
        document_path: Path of the document being processed. Relative
            ``src`` values are resolved against its directory.

    Returns:
        Mapping of asset identity to its nodes, both in discovery order.

    Raises:
        PathResolutionError: If the document path is unknown.
    """
    if not document_path:
        raise PathResolutionError(
            "Cannot inline SVG images because the path of the HTML file is unknown"
        )
    base_dir = os.path.dirname(os.fspath(document_path))

    groups: ReferenceGroups = {}
    for node in references:
        path = resolve_asset_path(node[TARGET_ATTRIBUTE], base_dir)
        groups.setdefault(path, []).append(node)
    return groups
