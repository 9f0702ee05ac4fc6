# src/api/facade.py — v2
"""Public API facade for HTML strings and files.

Usage:
    from svginline.api.facade import inline_html
    html = await inline_html(html, "site/index.html")
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from svginline.extraction.html_document import parse_html
from svginline.pipeline.engine import InlineSvgEngine

logger = logging.getLogger(__name__)


async def inline_html(
    html: str,
    document_path: str | Path | None,
    engine: InlineSvgEngine | None = None,
) -> str:
    """Inline SVG images referenced by ``html`` and return the new markup.

    Args:
        html: HTML source.
        document_path: Where the HTML lives; relative <img> sources are
            resolved against its directory.
        engine: Shared engine. A throwaway one is used if None, which
            means nothing is cached between calls.
    """
    engine = engine or InlineSvgEngine()
    soup = parse_html(html)
    await engine.process(soup, document_path)
    return str(soup)


async def inline_file(
    path: Path,
    engine: InlineSvgEngine,
    output_path: Path | None = None,
    encoding: str = "utf-8",
) -> Path:
    """Inline SVG images in an HTML file and write the result.

    Args:
        path: HTML file to process.
        engine: Shared engine.
        output_path: Destination file. Defaults to overwriting ``path``.
        encoding: Encoding for reading and writing.

    Returns:
        The path that was written.
    """
    path = Path(path).absolute()
    html = await asyncio.to_thread(path.read_text, encoding=encoding)
    result = await inline_html(html, path, engine)

    target = Path(output_path) if output_path is not None else path
    target.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(target.write_text, result, encoding=encoding)
    logger.debug("Wrote %s", target)
    return target
