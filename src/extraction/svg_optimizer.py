# src/extraction/svg_optimizer.py — v1
"""SVG optimization transform applied to file contents before caching.

The cache treats optimizers as opaque ``content -> content`` functions.
The default SvgOptimizer strips markup that has no effect on rendering
once the SVG is inlined into an HTML page.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Union

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, Tag
from pydantic import BaseModel, ConfigDict

from svginline.core.errors import OptimizationError

logger = logging.getLogger(__name__)

EDITOR_PREFIXES = frozenset({"inkscape", "sodipodi", "sketch", "serif"})

# Whitespace inside these elements is rendered or parsed, so it is kept
WHITESPACE_SENSITIVE = frozenset({"text", "tspan", "textPath", "style", "script"})


class OptimizerConfig(BaseModel):
    """Switches for the default SVG optimizer."""

    model_config = ConfigDict(frozen=True)

    remove_comments: bool = True
    remove_metadata: bool = True
    remove_editor_data: bool = True
    remove_title: bool = False
    remove_desc: bool = False
    remove_empty_attrs: bool = True
    collapse_whitespace: bool = True


class BaseOptimizer(ABC):
    """Unified interface for SVG optimization transforms."""

    @abstractmethod
    def optimize(self, content: str, path: str) -> str:
        """Return optimized SVG markup for the file at ``path``."""


class SvgOptimizer(BaseOptimizer):
    """Markup-level optimizer built on BeautifulSoup's XML builder."""

    def __init__(self, config: OptimizerConfig | None = None) -> None:
        self.config = config or OptimizerConfig()

    def optimize(self, content: str, path: str) -> str:
        try:
            soup = BeautifulSoup(content, "xml")
        except Exception as e:
            raise OptimizationError(path, f"Unable to parse SVG file {path}: {e}") from e

        svg = soup.find("svg")
        if svg is None:
            # Nothing to optimize; the rewriter reports the missing root
            logger.debug("No <svg> element in %s, leaving content as-is", path)
            return content

        cfg = self.config
        if cfg.remove_comments:
            for comment in svg.find_all(string=lambda s: isinstance(s, Comment)):
                comment.extract()

        doomed: list[str] = []
        if cfg.remove_metadata:
            doomed.append("metadata")
        if cfg.remove_title:
            doomed.append("title")
        if cfg.remove_desc:
            doomed.append("desc")
        if doomed:
            for tag in svg.find_all(doomed):
                tag.decompose()

        for tag in [svg, *svg.find_all(True)]:
            if tag.decomposed:
                continue
            if cfg.remove_editor_data and tag.prefix in EDITOR_PREFIXES:
                tag.decompose()
                continue
            tag.attrs = {
                key: value
                for key, value in tag.attrs.items()
                if not self._drop_attribute(key, value)
            }

        if cfg.collapse_whitespace:
            _collapse_whitespace(svg)

        optimized = svg.decode()
        logger.debug(
            "Optimized %s: %d -> %d chars", path, len(content), len(optimized)
        )
        return optimized

    def _drop_attribute(self, key: str, value: object) -> bool:
        cfg = self.config
        if cfg.remove_editor_data:
            prefix, _, local = key.partition(":")
            if prefix in EDITOR_PREFIXES or (prefix == "xmlns" and local in EDITOR_PREFIXES):
                return True
        if cfg.remove_empty_attrs and value == "":
            return True
        return False


def _collapse_whitespace(root: Tag) -> None:
    """Remove whitespace-only text nodes between elements."""
    for node in list(root.descendants):
        if (
            isinstance(node, NavigableString)
            and not isinstance(node, Comment)
            and not node.strip()
            and node.parent is not None
            and node.parent.name not in WHITESPACE_SENSITIVE
        ):
            node.extract()


OptimizeOption = Union[bool, OptimizerConfig, BaseOptimizer]


def create_optimizer(optimize: OptimizeOption = True) -> BaseOptimizer | None:
    """Instantiate the configured optimizer.

    Args:
        optimize: False disables optimization, True uses the default
            configuration, an OptimizerConfig customizes it and a
            BaseOptimizer instance is used as-is.

    Returns:
        Optimizer instance, or None when optimization is disabled.
    """
    if isinstance(optimize, BaseOptimizer):
        return optimize
    if isinstance(optimize, OptimizerConfig):
        return SvgOptimizer(optimize)
    if optimize is True:
        return SvgOptimizer()
    if optimize is False:
        return None
    raise ValueError(f"Unsupported optimize option: {optimize!r}")
