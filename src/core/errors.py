# src/core/errors.py — v1
"""Error taxonomy for SVG inlining.

Per-identity errors (read, optimize, root lookup) never abort unrelated
assets; PathResolutionError aborts one document; InternalConsistencyFault
is a programming error and is never caught by the engine.
"""

from __future__ import annotations


class InlineSvgError(Exception):
    """Base class for all svginline domain errors."""


class PathResolutionError(InlineSvgError):
    """Raised when a document's own location is unknown."""


class AssetError(InlineSvgError):
    """Failure tied to a single asset identity."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


class AssetReadError(AssetError):
    """Storage read failed (missing file, permission, undecodable bytes)."""


class OptimizationError(AssetError):
    """The optimization transform failed for an asset."""


class RootElementNotFoundError(AssetError):
    """Asset content parsed but contains no root <svg> element."""


class InternalConsistencyFault(RuntimeError):
    """The cache claim protocol was violated (an asset was read twice)."""
