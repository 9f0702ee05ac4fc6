# src/pipeline/engine.py — v1
"""InlineSvgEngine: replaces SVG <img> elements with inlined <svg> elements.

One engine instance owns one AssetCache, so every document processed by
the same instance (sequentially or concurrently) shares file reads and
optimization work. Everything else is stateless per document.

Per-document flow:
    find references -> group by file -> resolve through the cache
    -> apply the inlining policy -> rewrite the tree -> report efficiency
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from bs4.element import Tag

from svginline.cache.asset_cache import AssetCache
from svginline.core.models import CacheEfficiency, InlineReport, PolicyThresholds
from svginline.extraction.reference_finder import find_svg_references, group_references
from svginline.extraction.svg_optimizer import OptimizeOption, create_optimizer
from svginline.logging.context import reset_document_context, set_document_context
from svginline.pipeline.policy import filter_groups
from svginline.pipeline.rewriter import apply_inlining

if TYPE_CHECKING:
    from svginline.cache.asset_reader import BaseAssetReader
    from svginline.config.settings import Settings

logger = logging.getLogger(__name__)

CacheEfficiencyCallback = Callable[[CacheEfficiency], None]


class InlineSvgEngine:
    """Long-lived inliner; create one per batch or per server process."""

    def __init__(
        self,
        thresholds: PolicyThresholds | None = None,
        optimize: OptimizeOption = True,
        on_cache_efficiency: CacheEfficiencyCallback | None = None,
        reader: BaseAssetReader | None = None,
        on_error: Literal["skip", "raise"] = "skip",
    ) -> None:
        self.thresholds = thresholds or PolicyThresholds()
        self.on_error = on_error
        self._on_cache_efficiency = on_cache_efficiency
        self._cache = AssetCache(reader=reader, optimizer=create_optimizer(optimize))
        self._reported = CacheEfficiency()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        on_cache_efficiency: CacheEfficiencyCallback | None = None,
        reader: BaseAssetReader | None = None,
    ) -> InlineSvgEngine:
        """Build an engine from application settings."""
        return cls(
            thresholds=settings.thresholds,
            optimize=settings.optimizer_config if settings.optimize else False,
            on_cache_efficiency=on_cache_efficiency,
            reader=reader,
            on_error=settings.on_asset_error,
        )

    @property
    def cache(self) -> AssetCache:
        return self._cache

    @property
    def cache_efficiency(self) -> CacheEfficiency:
        return self._cache.stats

    async def process(self, tree: Tag, document_path: str | Path | None) -> Tag:
        """Inline SVG images in ``tree`` (mutated in place) and return it.

        Raises:
            PathResolutionError: If ``document_path`` is unknown.
            AssetError: For a failed file when ``on_error="raise"``.
        """
        tree, _ = await self.process_with_report(tree, document_path)
        return tree

    async def process_with_report(
        self, tree: Tag, document_path: str | Path | None
    ) -> tuple[Tag, InlineReport]:
        """Same as process(), also returning what happened to each file."""
        token = set_document_context(
            str(document_path or "<unknown>"), uuid.uuid4().hex[:8]
        )
        try:
            return await self._run(tree, document_path)
        finally:
            reset_document_context(token)

    async def _run(
        self, tree: Tag, document_path: str | Path | None
    ) -> tuple[Tag, InlineReport]:
        references = find_svg_references(tree)
        groups = group_references(references, document_path)
        report = InlineReport(document_path=str(document_path), references=len(references))
        if not groups:
            return tree, report

        resolved = await self._cache.resolve(groups)
        for path, error in resolved.failures.items():
            if self.on_error == "raise":
                raise error
            logger.warning("Skipping %s: %s", path, error)
            report.failed[path] = str(error)

        readable = {path: nodes for path, nodes in groups.items() if path in resolved.entries}
        accepted = filter_groups(readable, resolved.sizes, self.thresholds)
        report.rejected = [path for path in readable if path not in accepted]

        inlined, skipped = apply_inlining(accepted, resolved.entries, order=references)
        report.inlined = inlined
        for path, error in skipped.items():
            report.failed[path] = str(error)

        logger.debug(
            "Inlined %d of %d SVG files (%d references)",
            len(inlined), len(groups), len(references),
        )
        self._report_efficiency()
        return tree, report

    def _report_efficiency(self) -> None:
        """Invoke the callback if the counters moved since the last report."""
        current = self._cache.stats
        if current == self._reported:
            return
        self._reported = current
        logger.info(
            "SVG cache efficiency: hits=%d misses=%d", current.hits, current.misses
        )
        if self._on_cache_efficiency is not None:
            self._on_cache_efficiency(current)
