# src/batch/scanner.py — v2
"""Batch inliner: discover HTML files and process them concurrently.

All files go through ONE engine, so an SVG used on many pages is read
and optimized once for the whole batch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from svginline.batch.models import BatchResult, DocumentResult
from svginline.core.errors import InternalConsistencyFault
from svginline.extraction.html_document import parse_html
from svginline.pipeline.engine import InlineSvgEngine

logger = logging.getLogger(__name__)

HTML_EXTENSIONS = frozenset({".html", ".htm"})


class BatchInliner:
    """Scan directories for HTML documents and inline their SVG images.

    Workflow:
        1. List all HTML files (recursive if enabled)
        2. Process them concurrently, at most ``concurrency`` at a time
        3. Return BatchResult with per-document outcomes and cache stats
    """

    def __init__(
        self,
        engine: InlineSvgEngine,
        concurrency: int = 8,
        encoding: str = "utf-8",
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._engine = engine
        self._concurrency = concurrency
        self._encoding = encoding

    def scan(self, scan_root: Path, recursive: bool = True) -> list[Path]:
        """Discover all HTML files under ``scan_root``, sorted by path.

        Raises:
            ValueError: If ``scan_root`` is not a directory.
        """
        if not scan_root.is_dir():
            msg = f"Scan root is not a directory: {scan_root}"
            raise ValueError(msg)

        pattern_fn = scan_root.rglob if recursive else scan_root.glob
        files = [
            path.absolute()
            for path in sorted(pattern_fn("*"))
            if path.is_file() and path.suffix.lower() in HTML_EXTENSIONS
        ]
        logger.info(
            "Scanned %s: found %d HTML files (recursive=%s)",
            scan_root, len(files), recursive,
        )
        return files

    async def run(
        self,
        scan_root: Path,
        output_dir: Path | None = None,
        recursive: bool = True,
    ) -> BatchResult:
        """Scan ``scan_root`` and process every HTML file found.

        Args:
            scan_root: Directory to scan.
            output_dir: Mirror outputs here (relative layout preserved).
                Files are rewritten in place if None.
            recursive: Scan subdirectories.
        """
        t0 = time.perf_counter()
        scan_root = scan_root.absolute()
        files = self.scan(scan_root, recursive)

        targets = [
            (path, output_dir / path.relative_to(scan_root) if output_dir else None)
            for path in files
        ]
        documents = await self.process_files(targets)

        errors = sum(1 for d in documents if d.error is not None)
        return BatchResult(
            scan_root=str(scan_root),
            total_files_found=len(files),
            processed=len(documents) - errors,
            errors=errors,
            documents=documents,
            cache_efficiency=self._engine.cache_efficiency,
            duration_seconds=round(time.perf_counter() - t0, 2),
        )

    async def process_files(
        self, targets: list[tuple[Path, Path | None]]
    ) -> list[DocumentResult]:
        """Process (source, destination) pairs concurrently, in input order."""
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _bounded(source: Path, destination: Path | None) -> DocumentResult:
            async with semaphore:
                return await self._process_one(source, destination)

        return list(
            await asyncio.gather(*(_bounded(src, dst) for src, dst in targets))
        )

    async def _process_one(
        self, source: Path, destination: Path | None
    ) -> DocumentResult:
        """Process one file; failures are recorded, not raised."""
        try:
            html = await asyncio.to_thread(source.read_text, encoding=self._encoding)
            soup = parse_html(html)
            _, report = await self._engine.process_with_report(soup, source)
            target = destination or source
            target.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(target.write_text, str(soup), encoding=self._encoding)
        except InternalConsistencyFault:
            raise
        except Exception as e:
            logger.exception("Failed to process %s", source)
            return DocumentResult(source_path=str(source), error=str(e))

        return DocumentResult(
            source_path=str(source),
            output_path=str(target),
            inlined=len(report.inlined),
        )
