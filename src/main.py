# src/main.py — v2
"""CLI entry point: inline and batch commands.

Usage:
    svginline inline <file>... [options]
    svginline batch <directory> [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import math
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from svginline.version import __version__

if TYPE_CHECKING:
    from svginline.config.settings import Settings
    from svginline.core.models import CacheEfficiency

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        settings = _load_settings(args)
    except Exception as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="svginline",
        description=f"svginline v{__version__}: inline small SVG images into HTML",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    limits = argparse.ArgumentParser(add_help=False)
    limits.add_argument(
        "--max-image-size", type=_limit, default=None,
        help="Largest SVG (bytes, after optimization) to inline; 'inf' = no limit",
    )
    limits.add_argument(
        "--max-occurrences", type=_limit, default=None,
        help="Most times one SVG may appear on a page and still be inlined",
    )
    limits.add_argument(
        "--max-total-size", type=_limit, default=None,
        help="Largest combined size of all occurrences of one SVG on a page",
    )
    limits.add_argument(
        "--no-optimize", action="store_true",
        help="Inline SVG files exactly as they are on disk",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- inline ---
    p_inline = subparsers.add_parser(
        "inline", parents=[limits], help="Inline SVGs in one or more HTML files",
    )
    p_inline.add_argument("files", type=Path, nargs="+", help="HTML files")
    p_inline.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output directory (default: rewrite files in place)",
    )
    p_inline.set_defaults(func=_cmd_inline)

    # --- batch ---
    p_batch = subparsers.add_parser(
        "batch", parents=[limits], help="Inline SVGs in every HTML file of a directory",
    )
    p_batch.add_argument("directory", type=Path, help="Directory to scan")
    p_batch.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output directory (default: rewrite files in place)",
    )
    p_batch.add_argument(
        "--no-recursive", action="store_true",
        help="Disable recursive scanning",
    )
    p_batch.set_defaults(func=_cmd_batch)

    return parser


def _limit(value: str) -> float:
    """argparse type for a non-negative limit, accepting 'inf'."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if math.isnan(number) or number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {value!r}")
    return number


def _load_settings(args: argparse.Namespace) -> Settings:
    """Load settings, applying command-line overrides."""
    from svginline.config.settings import load_settings

    overrides: dict[str, object] = {}
    for name in ("max_image_size", "max_occurrences", "max_total_size"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    if getattr(args, "no_optimize", False):
        overrides["optimize"] = False
    return load_settings(**overrides)


async def _cmd_inline(args: argparse.Namespace, settings: Settings) -> int:
    """Inline SVGs in the given files, concurrently, through one engine."""
    from svginline.batch.scanner import BatchInliner
    from svginline.pipeline.engine import InlineSvgEngine

    missing = [f for f in args.files if not f.is_file()]
    for path in missing:
        logger.error("File not found: %s", path)
    if missing:
        return 1

    engine = InlineSvgEngine.from_settings(settings)
    inliner = BatchInliner(
        engine,
        concurrency=settings.batch_concurrency,
        encoding=settings.output_encoding,
    )
    targets = [
        (path.absolute(), args.output / path.name if args.output else None)
        for path in args.files
    ]
    documents = await inliner.process_files(targets)

    failed = 0
    for doc in documents:
        if doc.error:
            failed += 1
            print(f"  FAILED   {doc.source_path}: {doc.error}")
        else:
            print(f"  {doc.inlined:3d} SVG  {doc.output_path}")
    _print_efficiency(engine.cache_efficiency)
    return 1 if failed else 0


async def _cmd_batch(args: argparse.Namespace, settings: Settings) -> int:
    """Execute batch directory processing."""
    from svginline.batch.scanner import BatchInliner
    from svginline.pipeline.engine import InlineSvgEngine

    directory: Path = args.directory
    if not directory.is_dir():
        logger.error("Not a directory: %s", directory)
        return 1

    engine = InlineSvgEngine.from_settings(settings)
    inliner = BatchInliner(
        engine,
        concurrency=settings.batch_concurrency,
        encoding=settings.output_encoding,
    )
    recursive = settings.batch_recursive and not args.no_recursive

    logger.info("Batch scanning %s", directory)
    result = await inliner.run(directory, output_dir=args.output, recursive=recursive)

    print("\nBatch complete:")
    print(f"  Files found:  {result.total_files_found}")
    print(f"  Processed:    {result.processed}")
    print(f"  Errors:       {result.errors}")
    print(f"  Duration:     {result.duration_seconds:.1f}s")
    _print_efficiency(result.cache_efficiency)
    return 1 if result.errors else 0


def _print_efficiency(efficiency: CacheEfficiency) -> None:
    print(
        f"  Cache:        {efficiency.hits} hits, {efficiency.misses} misses"
        f" ({efficiency.hit_ratio:.0%} hit ratio)"
    )


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from svginline.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
