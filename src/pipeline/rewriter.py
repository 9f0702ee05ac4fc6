# src/pipeline/rewriter.py — v1
"""Replace SVG <img> nodes with the parsed contents of their SVG files.

Every <img> gets its own copy of the parsed <svg> element, so later
mutation of one inlined node never leaks into another.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping, Sequence

from bs4 import BeautifulSoup
from bs4.element import Tag

from svginline.cache.models import CacheEntry
from svginline.core.errors import RootElementNotFoundError
from svginline.core.models import AssetIdentity
from svginline.extraction.reference_finder import TARGET_ATTRIBUTE

logger = logging.getLogger(__name__)

FragmentParser = Callable[[str, str], Tag]


def parse_svg_fragment(content: str, path: str) -> Tag:
    """Parse SVG markup and return its root <svg> element.

    Raises:
        RootElementNotFoundError: If no top-level <svg> element exists.
    """
    soup = BeautifulSoup(content, "xml")
    for child in soup.children:
        if isinstance(child, Tag) and child.name == "svg":
            return child
    raise RootElementNotFoundError(
        path,
        f"Error parsing SVG image: {path}\nUnable to find the root <svg> element.",
    )


def merge_attributes(reference: Mapping[str, object], fragment: Mapping[str, object]) -> dict:
    """Overlay the <img> attributes on the <svg> attributes, minus ``src``."""
    merged = {**fragment, **reference}
    merged.pop(TARGET_ATTRIBUTE, None)
    return merged


def build_inline_node(reference: Tag, fragment: Tag) -> Tag:
    """Return a new node with the fragment's tag and children and merged attributes."""
    node = copy.copy(fragment)
    node.attrs = merge_attributes(reference.attrs, fragment.attrs)
    return node


def _substitute(reference: Tag, node: Tag) -> None:
    if reference.parent is not None:
        reference.replace_with(node)
        return
    # A detached reference (e.g. the tree root) is overwritten in place
    reference.name = node.name
    reference.prefix = node.prefix
    reference.attrs = node.attrs
    reference.clear()
    for child in list(node.contents):
        reference.append(child.extract())


def apply_inlining(
    groups: Mapping[AssetIdentity, Sequence[Tag]],
    entries: Mapping[AssetIdentity, CacheEntry],
    order: Sequence[Tag] | None = None,
    parse: FragmentParser = parse_svg_fragment,
) -> tuple[list[AssetIdentity], dict[AssetIdentity, RootElementNotFoundError]]:
    """Inline every reference of every group.

    Args:
        groups: Groups that passed the inlining policy.
        entries: Ready cache entries keyed by asset identity.
        order: References in discovery order; rewriting follows it when given.
        parse: Parser turning cached content into a root <svg> element.

    Returns:
        Identities that were inlined, and the identities skipped because
        their content has no root <svg> element.
    """
    fragments: dict[AssetIdentity, Tag] = {}
    skipped: dict[AssetIdentity, RootElementNotFoundError] = {}
    for path in groups:
        try:
            fragments[path] = parse(entries[path].content, path)
        except RootElementNotFoundError as e:
            logger.warning("Not inlining %s: %s", path, e)
            skipped[path] = e

    targets: dict[int, tuple[Tag, AssetIdentity]] = {}
    for path, nodes in groups.items():
        if path in fragments:
            for node in nodes:
                targets[id(node)] = (node, path)

    if order is not None:
        sequence = [targets[id(node)] for node in order if id(node) in targets]
    else:
        sequence = list(targets.values())

    for reference, path in sequence:
        _substitute(reference, build_inline_node(reference, fragments[path]))

    return list(fragments), skipped
