# src/cache/asset_cache.py — v1
"""Deduplicating in-memory cache of SVG file contents.

Saves reading (and optimizing) the same file many times when it occurs
more than once on a page, or across many pages processed by the same
engine instance, including pages processed concurrently.

Claim protocol:
    1. Under the lock, every identity without an entry gets a ``pending``
       placeholder and exactly one read-and-optimize task.
    2. Every caller, claimant or late arrival, awaits that task through
       ``asyncio.shield`` so a cancelled caller never cancels shared work.
    3. A finished task is forgotten. Later callers take the ready entry
       directly, so the cache can be reused under another event loop.
    4. A failed or cancelled task also removes its placeholder so the next
       resolve() retries from scratch.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from svginline.cache.asset_reader import BaseAssetReader, FileAssetReader
from svginline.cache.models import CacheEntry, CacheStats, ResolvedAssets
from svginline.core.errors import (
    AssetError,
    AssetReadError,
    InternalConsistencyFault,
    OptimizationError,
)
from svginline.core.models import AssetIdentity
from svginline.extraction.svg_optimizer import BaseOptimizer

logger = logging.getLogger(__name__)


class AssetCache:
    """Per-engine store guaranteeing at most one read per asset identity."""

    def __init__(
        self,
        reader: BaseAssetReader | None = None,
        optimizer: BaseOptimizer | None = None,
    ) -> None:
        self._reader = reader or FileAssetReader()
        self._optimizer = optimizer
        self._entries: dict[AssetIdentity, CacheEntry] = {}
        self._tasks: dict[AssetIdentity, asyncio.Task[CacheEntry]] = {}
        self._lock = asyncio.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def stats(self) -> CacheStats:
        """Snapshot of the cumulative counters."""
        return CacheStats(hits=self._hits, misses=self._misses)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def get(self, path: AssetIdentity) -> CacheEntry | None:
        """Return the entry for ``path`` if it is ready."""
        entry = self._entries.get(path)
        return entry if entry is not None and entry.ready else None

    async def resolve(
        self, groups: Mapping[AssetIdentity, Sequence[Any]]
    ) -> ResolvedAssets:
        """Read any files that aren't cached yet and wait for all of them.

        Args:
            groups: Asset identity mapped to the references pointing at it.
                The number of references drives hit/miss accounting.

        Returns:
            ResolvedAssets with a ready entry per successful identity and
            the error for each identity whose read or optimization failed.
        """
        ready, tasks = await self._claim(groups)

        results = await asyncio.gather(
            *(asyncio.shield(task) for task in tasks.values()),
            return_exceptions=True,
        )

        outcomes: dict[AssetIdentity, Any] = {**ready, **dict(zip(tasks, results))}
        resolved = ResolvedAssets()
        for path in groups:
            result = outcomes[path]
            if isinstance(result, AssetError):
                resolved.failures[path] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                resolved.entries[path] = result
        return resolved

    async def _claim(
        self, groups: Mapping[AssetIdentity, Sequence[Any]]
    ) -> tuple[
        dict[AssetIdentity, CacheEntry], dict[AssetIdentity, asyncio.Task[CacheEntry]]
    ]:
        """Claim unseen identities.

        Returns:
            Entries that are already ready, and the in-flight task for
            every other identity.
        """
        ready: dict[AssetIdentity, CacheEntry] = {}
        tasks: dict[AssetIdentity, asyncio.Task[CacheEntry]] = {}
        loop = asyncio.get_running_loop()
        async with self._lock:
            for path, nodes in groups.items():
                occurrences = len(nodes)
                entry = self._entries.get(path)
                if entry is not None and entry.ready:
                    self._hits += occurrences
                    ready[path] = entry
                    logger.debug("Cache hit: %s (x%d)", path, occurrences)
                    continue

                task = self._tasks.get(path)
                if entry is not None and task is not None and task.get_loop() is loop:
                    self._hits += occurrences
                    tasks[path] = task
                    logger.debug("Cache hit (pending): %s (x%d)", path, occurrences)
                    continue

                # A placeholder left by a task of a closed event loop is stale
                if entry is not None:
                    logger.debug("Discarding stale placeholder for %s", path)
                    self._tasks.pop(path, None)

                # Immediately add a placeholder so nobody else reads this file
                self._entries[path] = CacheEntry(path=path)
                self._misses += 1
                self._hits += occurrences - 1
                task = loop.create_task(self._load(path))
                task.add_done_callback(lambda t, p=path: self._settle(p, t))
                self._tasks[path] = task
                tasks[path] = task
                logger.debug("Cache miss: %s (x%d)", path, occurrences)
        return ready, tasks

    async def _load(self, path: AssetIdentity) -> CacheEntry:
        """Read the SVG file, optimize it if enabled, and fill its entry."""
        try:
            raw = await self._reader.read(path)
        except AssetReadError:
            raise
        except OSError as e:
            raise AssetReadError(path, f"Unable to read SVG file {path}: {e}") from e
        try:
            content = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise AssetReadError(path, f"SVG file is not valid UTF-8: {path}") from e

        if self._optimizer is not None:
            try:
                content = self._optimizer.optimize(content, path)
            except OptimizationError:
                raise
            except Exception as e:
                raise OptimizationError(
                    path, f"Unable to optimize SVG file {path}: {e}"
                ) from e

        entry = self._entries.get(path)
        # Two reads of the same file mean the claim protocol is broken
        if entry is None or entry.ready or entry.content:
            raise InternalConsistencyFault(
                f"AssetCache encountered a race condition. {path} was read multiple times."
            )

        entry.content = content
        entry.size = len(content.encode("utf-8"))
        entry.state = "ready"
        return entry

    def _settle(self, path: AssetIdentity, task: asyncio.Task[CacheEntry]) -> None:
        """Forget a finished task; drop its placeholder if it did not succeed."""
        if self._tasks.get(path) is not task:
            return
        del self._tasks[path]
        if task.cancelled() or task.exception() is not None:
            self._entries.pop(path, None)
            logger.debug("Released placeholder for %s", path)
